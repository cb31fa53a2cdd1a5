"""Configure pytest for the project."""

import os
import sys

# Add the project root directory to Python path
project_root = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)
sys.path.insert(0, project_root)

# The Supabase verifier reads these at import time; tests never reach the network
os.environ.setdefault("SUPABASE_URL", "https://identity.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
