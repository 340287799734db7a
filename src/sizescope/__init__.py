"""sizescope - cached, concurrent folder sizing and top-K folder search."""

from sizescope.cache import SignatureCache, compute_shallow_signature
from sizescope.cancel import CancelToken
from sizescope.models import CacheEntry, DeleteOutcome, DeleteResult, DirSignature, Item
from sizescope.scanner import FolderScanner, fast_folder_size
from sizescope.topk import find_top_k, is_ancestor

__version__ = "0.1.0"

__all__ = [
    "CacheEntry",
    "CancelToken",
    "DeleteOutcome",
    "DeleteResult",
    "DirSignature",
    "FolderScanner",
    "Item",
    "SignatureCache",
    "compute_shallow_signature",
    "fast_folder_size",
    "find_top_k",
    "is_ancestor",
]
