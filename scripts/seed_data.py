#!/usr/bin/env python3
"""
Create the schema and seed a demo set of shelters, pets and one adoption.

Seeding is skipped when the database already holds pets, so the script can
run on every deploy.  With --reset all tables are dropped first.

Usage:
    python3 scripts/seed_data.py [--db-url URL] [--reset]

The database URL defaults to adoption_config.get_settings().database_url
(ADOPTION_DATABASE_URL / DATABASE_URL / defaults.yaml).  Exits 1 if the
database cannot be reached or a write fails.
"""

import argparse
import sys
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adoption_kernel.exceptions import StorageFailureError

# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

# (username, email, shelter name, license number, capacity)
SHELTERS = [
    ("shelter_paws", "staff@pawsandclaws.example.org", "Paws & Claws Shelter", "LIC-PAW-001", 50),
    ("shelter_haven", "staff@safehaven.example.org", "Safe Haven Rescue", "LIC-HAV-002", 40),
    ("shelter_tails", "staff@happytails.example.org", "Happy Tails Sanctuary", "LIC-TAL-003", 60),
]

# shelter index -> (name, species, breed, years, months, gender, fee, description)
PETS = {
    0: [
        ("Max", "Dog", "Golden Retriever", 2, 0, "male", "150.00", "Friendly, loves fetch."),
        ("Luna", "Cat", "Siamese", 1, 6, "female", "90.00", "Vocal and affectionate."),
        ("Rocky", "Dog", "Bulldog", 4, 0, "male", "120.00", "Lazy but lovable."),
    ],
    1: [
        ("Bella", "Dog", "Beagle", 3, 0, "female", "130.00", "Curious trail hound, needs a fenced yard."),
        ("Thumper", "Rabbit", "Holland Lop", 0, 9, "male", "40.00", "Loves carrots."),
        ("Daisy", "Cat", "Tabby", 5, 0, "female", "60.00", "Quiet lap cat."),
    ],
    2: [
        ("Cooper", "Dog", "Australian Shepherd", 1, 0, "male", "175.00", "High energy, agility prospect."),
        ("Simba", "Cat", "Maine Coon", 2, 0, "male", "110.00", "Gentle giant."),
        ("Rio", "Bird", "Blue Macaw", 4, 0, "male", "300.00", "Talks and dances."),
    ],
}

DEMO_ADOPTER = ("demo_adopter", "adopter@example.org", "Jamie Demo")
INTAKE_DATE = date(2025, 5, 1)
DEMO_DECISION_DATE = date(2025, 6, 14)
DEMO_NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


@dataclass(frozen=True)
class SeedSummary:
    """What seed_demo_data() wrote."""

    shelters: int = 0
    pets: int = 0
    applications: int = 0
    adoptions: int = 0
    skipped: bool = False


def seed_demo_data(session: Session) -> SeedSummary:
    """
    Seed shelters, pets, a demo adopter and one finalized adoption.

    Pets are registered through PetService and the adoption goes through
    the submission gate and the finalization coordinator, so the demo data
    obeys the same rules as live traffic.  Does nothing if any pet exists.
    """
    from adoption_kernel.domain.clock import DeterministicClock
    from adoption_kernel.domain.dtos import ApplicationDraft, PetDraft
    from adoption_kernel.models import Gender, Pet, UserType
    from adoption_kernel.services import (
        AdoptionFinalizationCoordinator,
        ApplicationSubmissionGate,
        PetService,
    )
    from adoption_kernel.stores import CustodianStore, UserStore

    if session.execute(select(func.count(Pet.id))).scalar_one() > 0:
        return SeedSummary(skipped=True)

    users = UserStore(session)
    custodians = CustodianStore(session)
    shelters = []
    for username, email, name, license_number, capacity in SHELTERS:
        staff = users.create(username, email, name, UserType.SHELTER)
        custodian = custodians.create(staff.id, name, license_number, capacity=capacity)
        shelters.append((staff, custodian))
    adopter = users.create(*DEMO_ADOPTER, UserType.ADOPTER)
    session.commit()

    pet_service = PetService(session)
    registered = []
    for index, (staff, custodian) in enumerate(shelters):
        for name, species, breed, years, months, gender, fee, description in PETS[index]:
            registered.append(pet_service.register_intake(
                staff.id,
                PetDraft(
                    custodian_id=custodian.id,
                    name=name,
                    species=species,
                    breed=breed,
                    age_years=years,
                    age_months=months,
                    gender=Gender(gender),
                    description=description,
                    adoption_fee=Decimal(fee),
                    intake_date=INTAKE_DATE,
                ),
            ))

    clock = DeterministicClock(DEMO_NOW)
    first_pet = registered[0]
    submitted = ApplicationSubmissionGate(session, clock=clock).submit_application(
        ApplicationDraft(
            pet_id=first_pet.id,
            adopter_id=adopter.id,
            application_text=f"We'd love to adopt {first_pet.name}.",
            household_members=2,
            has_yard=True,
        ),
    )
    if not submitted.is_success:
        raise RuntimeError(f"demo application rejected: {submitted.error}")

    finalized = AdoptionFinalizationCoordinator(session, clock=clock).finalize_adoption(
        first_pet.id,
        submitted.application.id,
        DEMO_DECISION_DATE,
        "Demo adoption",
        shelters[0][0].id,
    )
    if not finalized.is_success:
        raise RuntimeError(f"demo finalization failed: {finalized.error}")

    return SeedSummary(
        shelters=len(shelters),
        pets=len(registered),
        applications=1,
        adoptions=1,
    )


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create the schema and seed demo adoption data")
    p.add_argument(
        "--db-url",
        default=None,
        help="Database URL (default: from adoption_config settings)",
    )
    p.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables before recreating them",
    )
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)

    from adoption_config import get_settings
    from adoption_kernel.db.engine import (
        create_tables,
        drop_tables,
        get_session,
        init_engine_from_url,
        reset_engine,
    )
    from adoption_kernel.db.immutability import register_immutability_listeners

    db_url = args.db_url or get_settings().database_url

    print()
    print("  [1/3] Connecting...")
    try:
        engine = init_engine_from_url(db_url, echo=False)
        # Engines connect lazily; open one connection now so an unreachable
        # database is reported here rather than halfway through seeding.
        with engine.connect():
            pass

        print("  [2/3] Creating schema...")
        if args.reset:
            drop_tables()
        create_tables()
        register_immutability_listeners()

        print("  [3/3] Seeding demo data...")
        session = get_session()
        try:
            summary = seed_demo_data(session)
        finally:
            session.close()
    except (SQLAlchemyError, StorageFailureError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        reset_engine()

    if summary.skipped:
        print("  Pets already exist. Skipping seeding.")
    else:
        print(
            f"  Seeded {summary.shelters} shelters, {summary.pets} pets, "
            f"{summary.applications} application, {summary.adoptions} adoption."
        )
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
