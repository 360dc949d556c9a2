"""
Migration script to create all database tables

Run this script to create all database tables:
    python -m filmly.migrations.create_all_tables
"""

from filmly.database import engine, Base
# Import all models to ensure they're registered with Base
from filmly.models.blob import KeyValueBlob  # noqa: F401


def create_tables():
    """Create all database tables"""
    print("=" * 60)
    print(f"Creating database tables on {engine.url.render_as_string(hide_password=True)}...")
    print("=" * 60)

    try:
        Base.metadata.create_all(bind=engine)

        print("\nAll tables created successfully!")
        print("\nTables created:")
        for table in Base.metadata.sorted_tables:
            print(f"   - {table.name}")
        print("=" * 60)

    except Exception as e:
        print(f"\nError creating tables: {e}")
        raise


if __name__ == "__main__":
    create_tables()
