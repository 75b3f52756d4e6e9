import os

from raffledesk.auth import create_admin
from raffledesk.db.engine import get_sessionmaker, make_engine
from raffledesk.models import Base
from raffledesk.workflows import create_prize, submit_entry


SAMPLE_ENTRIES = [
    {"first_name": "Alice", "last_name": "Anders", "email": "alice@example.com", "phone": "555-010-0001"},
    {"first_name": "Bob", "last_name": "Brooks", "email": "bob@example.com", "phone": "(555) 010-0002"},
    {"first_name": "Carol", "last_name": "Chen", "email": "carol@example.com", "phone": "555.010.0003"},
    {"first_name": "Dan", "last_name": "Diaz", "email": "dan@example.com", "phone": "5550100004"},
]

SAMPLE_PRIZES = [
    {"name": "Grand Prize Basket", "description": "Gift basket donated by local shops"},
    {"name": "Coffee Gift Card", "description": "$25 gift card"},
    {"name": "Tote Bag"},
]


def main() -> None:
    """Reset the development database and fill it with sample raffle data."""
    engine = make_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    with Session.begin() as session:
        create_admin(
            session,
            os.getenv("SEED_ADMIN_EMAIL", "admin@example.com"),
            os.getenv("SEED_ADMIN_PASSWORD", "change-me"),
            name="raffle_admin",
            role="superuser",
        )
        for fields in SAMPLE_ENTRIES:
            submit_entry(session, fields)
        for fields in SAMPLE_PRIZES:
            create_prize(session, fields)

    print(f"Seeded {len(SAMPLE_ENTRIES)} entries and {len(SAMPLE_PRIZES)} prizes.")


if __name__ == "__main__":
    main()
