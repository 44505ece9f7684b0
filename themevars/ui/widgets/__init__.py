from themevars.ui.widgets.file_picker import FilePicker
from themevars.ui.widgets.progress_bar import ProgressIndicator

__all__ = [
    "FilePicker",
    "ProgressIndicator",
]
