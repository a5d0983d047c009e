import sys
import os

# Make the source tree importable when pytest is run from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
