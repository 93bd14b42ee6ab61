"""File store adapters: a project directory on disk, or an in-memory tree."""

import os


class LocalFileStore:
    """Files under a project root directory. Paths are root-relative, "/"-separated."""

    def __init__(self, root):
        self.root = os.path.realpath(root)

    def _resolve(self, path):
        full_path = os.path.join(self.root, path.lstrip("/"))
        resolved = os.path.realpath(full_path)
        if not resolved.startswith(self.root + os.sep):
            raise ValueError(f"Path escapes project root: {path}")
        return resolved

    def read(self, path):
        with open(self._resolve(path), encoding="utf-8") as fp:
            return fp.read()

    def write(self, path, content):
        resolved = self._resolve(path)
        os.makedirs(os.path.dirname(resolved), exist_ok=True)
        with open(resolved, "w", encoding="utf-8") as fp:
            fp.write(content)

    def delete(self, path):
        os.remove(self._resolve(path))

    def rename(self, old_path, new_path):
        src = self._resolve(old_path)
        dst = self._resolve(new_path)
        os.makedirs(os.path.dirname(dst), exist_ok=True)
        # Case-only renames on case-insensitive filesystems need a hop
        if src.lower() == dst.lower() and src != dst:
            tmp = dst + ".casing-tmp"
            os.rename(src, tmp)
            os.rename(tmp, dst)
        else:
            os.rename(src, dst)

    def exists(self, path):
        try:
            return os.path.isfile(self._resolve(path))
        except ValueError:
            return False

    def list_files(self, prefix=""):
        """Return every file path under prefix, skipping node_modules and dot dirs."""
        base = self._resolve(prefix) if prefix else self.root
        if not os.path.isdir(base):
            return []
        found = []
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames[:] = [d for d in dirnames
                           if d != "node_modules" and not d.startswith(".")]
            for name in filenames:
                rel = os.path.relpath(os.path.join(dirpath, name), self.root)
                found.append(rel.replace(os.sep, "/"))
        return sorted(found)


class MemoryFileStore:
    """In-memory file tree that records every mutation as (op, path)."""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.mutations = []

    def read(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write(self, path, content):
        self.mutations.append(("write", path))
        self.files[path] = content

    def delete(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        self.mutations.append(("delete", path))
        del self.files[path]

    def rename(self, old_path, new_path):
        if old_path not in self.files:
            raise FileNotFoundError(old_path)
        self.mutations.append(("rename", old_path))
        self.mutations.append(("rename_to", new_path))
        self.files[new_path] = self.files.pop(old_path)

    def exists(self, path):
        return path in self.files

    def list_files(self, prefix=""):
        return sorted(p for p in self.files if p.startswith(prefix))

    def mutations_for(self, path):
        return [m for m in self.mutations if m[1] == path]
