import os
import psycopg2
from psycopg2.extras import RealDictCursor
import logging

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "postgresql://postgres:postgres@db:5432/myapp"


def get_db_connection():
    """
    Open a new database connection.

    Returns a connection that should be closed when done:
        conn = get_db_connection()
        try:
            # Use connection
        finally:
            conn.close()
    """
    return psycopg2.connect(
        os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        cursor_factory=RealDictCursor
    )


def init_db():
    """Initialize database tables"""
    conn = get_db_connection()
    cur = conn.cursor()

    try:
        # Location directory
        cur.execute("""
            CREATE TABLE IF NOT EXISTS locations (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                display_name TEXT,
                code TEXT,
                address_1 TEXT,
                address_2 TEXT,
                city TEXT,
                state TEXT,
                zip_code TEXT,
                phone_number TEXT,
                latitude DOUBLE PRECISION,
                longitude DOUBLE PRECISION,
                landing_page_url TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Per-location targeting; user_id NULL = global config
        cur.execute("""
            CREATE TABLE IF NOT EXISTS location_configs (
                id SERIAL PRIMARY KEY,
                location_id TEXT NOT NULL,
                user_id TEXT,
                budget NUMERIC(10, 2),
                custom_settings JSONB DEFAULT '{}'::jsonb,
                notes TEXT,
                is_active BOOLEAN DEFAULT TRUE,
                primary_lat DOUBLE PRECISION CHECK (primary_lat BETWEEN -90 AND 90),
                primary_lng DOUBLE PRECISION CHECK (primary_lng BETWEEN -180 AND 180),
                radius_miles NUMERIC(6, 2) CHECK (radius_miles > 0),
                coordinate_list JSONB DEFAULT '[]'::jsonb,
                landing_page_url TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (location_id, user_id)
            )
        """)

        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_location_configs_location_id
            ON location_configs(location_id)
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_locations_state_city
            ON locations(state, city)
        """)

        conn.commit()
        logger.info("Database tables initialized")

    finally:
        cur.close()
        conn.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
