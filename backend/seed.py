from datetime import date

from sqlmodel import Session, select

from db import engine
from models import DailyStatistic, Incentive, WeeklyMeeting


def seed_database():
    """Seed the database with sample statistics, SPIFF and weekly meeting data."""
    with Session(engine) as session:
        # Check if data already exists
        existing = session.exec(select(DailyStatistic)).first()
        if existing:
            print("Database already has data, skipping seed.")
            return

        # Daily calling activity for two SDRs over one week
        daily = [
            ("Ashar", date(2024, 9, 23), 120, 61, 22, 12),
            ("Muhammad Hassan", date(2024, 9, 23), 136, 31, 24, 6),
            ("Ashar", date(2024, 9, 24), 126, 32, 0, 0),
            ("Muhammad Hassan", date(2024, 9, 24), 137, 42, 7, 1),
            ("Ashar", date(2024, 9, 25), 123, 43, 0, 0),
            ("Muhammad Hassan", date(2024, 9, 25), 87, 0, 30, 0),
            ("Ashar", date(2024, 9, 26), 45, 11, 20, 52),
            ("Muhammad Hassan", date(2024, 9, 26), 0, 29, 0, 2),
            ("Ashar", date(2024, 9, 27), 124, 21, 29, 0),
            ("Muhammad Hassan", date(2024, 9, 27), 246, 0, 60, 0),
        ]
        sample_rows = [
            DailyStatistic(
                sdr_name=sdr_name,
                date=day,
                calls=calls,
                connected=connected,
                emails=emails,
                potential_appointments=potential,
            )
            for sdr_name, day, calls, connected, emails, potential in daily
        ]

        sample_rows.append(
            Incentive(
                approved=True,
                date_announced=date(2024, 1, 15),
                announced_by="Sarah Johnson",
                bdr_name="Manikant Ojha",
                amount=500,
                currency="USD",
                reason="Q4 Target Achievement",
                additional_notes="Exceeded quarterly quota by 120%",
            )
        )
        sample_rows.append(
            WeeklyMeeting(
                week="Week 1 (1-7th)",
                month="January",
                year="2025",
                first_name="Manikant",
                last_name="Ojha",
                company_name="TechCorp Inc",
                title="VP Sales",
                email="manikant@techcorp.com",
                contact_no="+1-555-0123",
                assigned_to="John Smith (AE)",
                location="New York, NY",
            )
        )

        session.add_all(sample_rows)
        session.commit()
        print(f"Seeded database with {len(sample_rows)} sample rows.")


if __name__ == "__main__":
    from db import create_db_and_tables

    create_db_and_tables()
    seed_database()
