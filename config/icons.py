"""Icon catalog used by the nearest-symbol repair."""

ICON_MODULE = "lucide-react"

DEFAULT_ICON = "ArrowRight"

# Keyword in the (lowercased) invalid name -> safe replacement. First match wins.
FALLBACK_RULES = [
    (("sun", "moon", "theme", "light", "dark"), "Sun"),
    (("discord", "slack", "message", "chat"), "MessageCircle"),
    (("social", "share"), "Share"),
    (("brand", "logo"), "Image"),
]

ICON_CATALOG = frozenset({
    "Activity", "AlarmClock", "AlertCircle", "AlertTriangle", "Archive",
    "ArrowDown", "ArrowLeft", "ArrowRight", "ArrowUp", "ArrowUpRight",
    "AtSign", "Award", "BarChart", "BarChart2", "BarChart3", "Battery",
    "Bell", "Bike", "Book", "BookOpen", "Bookmark", "Box", "Briefcase",
    "Brush", "Bug", "Building", "Building2", "Calendar", "Camera", "Car",
    "Check", "CheckCircle", "CheckCircle2", "ChevronDown", "ChevronLeft",
    "ChevronRight", "ChevronUp", "ChevronsUpDown", "Circle", "Clipboard",
    "Clock", "Cloud", "Code", "Code2", "Coffee", "Cog", "Compass", "Copy",
    "CreditCard", "Crown", "Database", "DollarSign", "Download", "Droplet",
    "Edit", "Edit2", "Edit3", "ExternalLink", "Eye", "EyeOff", "Facebook",
    "FileText", "Film", "Filter", "Flag", "Flame", "Folder", "Gift",
    "Github", "Globe", "GraduationCap", "Grid", "Hash", "Headphones",
    "Heart", "HelpCircle", "Home", "Image", "Inbox", "Info", "Instagram",
    "Key", "Laptop", "Layers", "Layout", "LayoutDashboard", "Leaf",
    "LifeBuoy", "Lightbulb", "Link", "Link2", "Linkedin", "List", "Loader",
    "Loader2", "Lock", "LogIn", "LogOut", "Mail", "Map", "MapPin",
    "Maximize", "Menu", "MessageCircle", "MessageSquare", "Mic", "Minus",
    "Monitor", "Moon", "MoreHorizontal", "MoreVertical", "Mountain",
    "Music", "Navigation", "Package", "Palette", "Paperclip", "Pause",
    "Pen", "PenTool", "Percent", "Phone", "PieChart", "Pin", "Plane",
    "Play", "Plus", "PlusCircle", "Power", "Printer", "Quote", "Radio",
    "RefreshCw", "Repeat", "Rocket", "RotateCcw", "Rss", "Save", "Scissors",
    "Search", "Send", "Server", "Settings", "Share", "Share2", "Shield",
    "ShieldCheck", "ShoppingBag", "ShoppingCart", "Shuffle", "Sidebar",
    "SkipBack", "SkipForward", "Slack", "Sliders", "Smartphone", "Smile",
    "Sparkles", "Speaker", "Square", "Star", "Store", "Sun", "Sunrise",
    "Sunset", "Tag", "Target", "Terminal", "ThumbsDown", "ThumbsUp",
    "Timer", "ToggleLeft", "ToggleRight", "Trash", "Trash2", "TrendingDown",
    "TrendingUp", "Trophy", "Truck", "Tv", "Twitter", "Type", "Umbrella",
    "Unlock", "Upload", "User", "UserCheck", "UserPlus", "Users", "Utensils",
    "Video", "Volume2", "VolumeX", "Wallet", "Wand2", "Watch", "Wifi",
    "Wind", "Wrench", "X", "XCircle", "Youtube", "Zap", "ZoomIn", "ZoomOut",
})


def fallback_icon(name):
    """Pick a safe replacement for an icon name with no close catalog match."""
    lowered = name.lower()
    for keywords, icon in FALLBACK_RULES:
        if any(k in lowered for k in keywords):
            return icon
    return DEFAULT_ICON
