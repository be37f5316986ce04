"""Process-wide classification session shared by the routers."""

import logging
import os
from typing import Optional

from services.symmetry.decision_tree import load_decision_tree
from services.symmetry.navigation import ClassificationSession

logger = logging.getLogger(__name__)

TREE_PATH_ENV = "SYMMETRY_LAB_TREE"

# Global instance
_session: Optional[ClassificationSession] = None


def get_session() -> ClassificationSession:
    """Get the global session, loading the decision tree on first use."""
    global _session
    if _session is None:
        tree_path = os.environ.get(TREE_PATH_ENV) or None
        tree = load_decision_tree(tree_path)
        logger.info("Decision tree loaded from %s (%d nodes)", tree_path or "bundled wallpaper tree", len(tree.nodes))
        _session = ClassificationSession(tree)
    return _session


def reset_session(session: Optional[ClassificationSession] = None) -> None:
    """Replace (or drop) the global session."""
    global _session
    _session = session
