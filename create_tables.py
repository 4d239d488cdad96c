"""
Database setup script
Creates the quota, subscription and quiz-history tables on the
database named by DATABASE_URL (the Supabase Postgres connection string).
"""

from dotenv import load_dotenv
load_dotenv()

from database.database import engine, Base
from database.models import UserSubscription, UserProfile, DailyUsage, QuizResult, UserStats  # noqa: F401


def create_tables():
    """Create all tables in the database"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully!")
    print("\nCreated tables:")
    print("  - user_subscriptions, user_profiles, daily_usage")
    print("  - quiz_results, user_stats")


if __name__ == "__main__":
    create_tables()
