from studysweep.archive.models import CleanupMode
from studysweep.core.models import ScanMode

SCAN_MODE_ALIASES = {
    "study": ScanMode.STUDY,
    "normal": ScanMode.STUDY,
    "exam": ScanMode.EXAM,
}

SCAN_MODE_CHOICES = list(SCAN_MODE_ALIASES.keys())

SCAN_MODE_HELP_TEXT = (
    "Scan mode:\n"
    "  study (normal) : Documents and code, suggestions below 40%% confidence are hidden\n"
    "  exam           : Also screenshots/photos (capped at 40%%), nothing is hidden\n"
    "Example:\n"
    "  %(prog)s ~/Documents/uni --mode exam"
)

CLEANUP_MODE_ALIASES = {
    "preview": CleanupMode.PREVIEW,
    "dry-run": CleanupMode.PREVIEW,
    "recycle": CleanupMode.RECYCLE,
    "trash": CleanupMode.RECYCLE,
    "archive": CleanupMode.ARCHIVE,
}

CLEANUP_MODE_CHOICES = list(CLEANUP_MODE_ALIASES.keys())

CLEANUP_MODE_HELP_TEXT = (
    "What to do with the suggested files:\n"
    "  preview (dry-run) : Show what would happen, change nothing\n"
    "  recycle (trash)   : Move files to the system trash\n"
    "  archive           : Move files to <archive-root>/<date>/<course>/\n"
)

EPILOG_TEXT = """
Examples:
  Rank cleanup suggestions for a study folder
  %(prog)s scan ~/Documents/uni

  Files untouched for 30+ days or bigger than 50MB, including screenshots
  %(prog)s scan ~/Documents/uni --age 30 --size 50MB --mode exam

  Archive the 20 highest-confidence suggestions (asks before risky moves)
  %(prog)s clean ~/Documents/uni --action archive --limit 20

  Same, but only files at 90%% confidence or more, without prompts (for scripts)
  %(prog)s clean ~/Documents/uni --action archive --min-confidence 0.9 --yes

  Review archives that are a month old
  %(prog)s archive check

  Delete archives older than 60 days
  %(prog)s archive clean --days 60
"""
