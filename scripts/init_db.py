import os
import sys

# --- PATH SETUP ---
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
sys.path.append(project_root)

from storefront.config import Settings
from storefront.utils.db import build_engine, create_tables


def main():
    settings = Settings.from_env()
    engine = build_engine(settings.database_url)
    create_tables(engine)
    print(f"✅ Tables ready in {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    main()
