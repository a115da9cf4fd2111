from buildrev.core.git_ops.runner import GitError
from buildrev.core.models import RevisionInfo
from buildrev.core.revision import get_revision, probe_revision

__version__ = "0.1.0"

__all__ = ["GitError", "RevisionInfo", "get_revision", "probe_revision"]
