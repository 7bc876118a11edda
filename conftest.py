"""Pytest configuration shared by every test directory.

IMPORTANT: Environment variables must be set BEFORE importing orgmeta.
A developer's .env or shell settings must never point tests at a real
org directory or store, so every ORGMETA_* location is redirected to a
throwaway directory here at module level.
"""

import os
import tempfile

_test_base_dir = tempfile.mkdtemp(prefix="orgmeta_test_")
os.environ["ORGMETA_DB_PATH"] = f"{_test_base_dir}/org_files.db"
os.environ["ORGMETA_ROOT_DIR"] = f"{_test_base_dir}/org"
os.environ["ORGMETA_ID_LOCATIONS_FILE"] = f"{_test_base_dir}/.org-id-locations"
os.environ.setdefault("ORGMETA_LOG_LEVEL", "debug")
os.environ.setdefault("ORGMETA_LOG_FORMAT", "text")
