import os
import sys

# Integration tests talk to a live FalkorDB. Point them at a disposable
# instance with CCRW_TEST_FALKORDB_HOST / CCRW_TEST_FALKORDB_PORT; they are
# skipped when nothing answers there.
os.environ.setdefault("CCRW_TEST_FALKORDB_HOST", "localhost")
os.environ.setdefault("CCRW_TEST_FALKORDB_PORT", "6379")

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))
