"""Page-level workflows built on the Notion core."""

from .audio_upload import AudioUploadWorkflow
from .content64 import Content64Workflow
from .content_copy import ContentCopyWorkflow
from .h1_audit import H1Audit, count_database_pages
from .notebooklm import NotebookLMWorkflow

__all__ = [
    "AudioUploadWorkflow",
    "Content64Workflow",
    "ContentCopyWorkflow",
    "H1Audit",
    "count_database_pages",
    "NotebookLMWorkflow",
]
