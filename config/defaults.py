"""Default pipeline settings."""

DEFAULTS = {
    "max_task_attempts": 5,
    "max_fix_attempts": 5,
    "hard_max_task_attempts": 10,   # absolute ceiling, cannot be overridden
    "hard_max_fix_attempts": 10,    # absolute ceiling, cannot be overridden
    "backoff_base": 1.0,            # seconds, doubled per retry
    "backoff_cap": 5.0,
    "model": "claude-sonnet-4-5-20250929",
    "max_tokens": 16384,
    "temperature": 0.3,
    "fix_temperature": 0.2,
    "context_files": 5,             # most recent accepted files listed in prompts
    "max_status_updates": 50,
    "compile_timeout": 120,
    "sandbox_timeout": 30,
    "allowed_commands": ["npx", "tsc", "node"],
}
