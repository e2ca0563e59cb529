import sys
from pathlib import Path

# Make the boxmenu package importable when running tests from a checkout
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
