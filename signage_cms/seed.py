import logging

from sqlalchemy.orm import Session

from signage_cms.db import Database
from signage_cms.models.customer import Customer
from signage_cms.models.layout import Layout
from signage_cms.models.player import Player
from signage_cms.models.site import Site
from signage_cms.schemas.schedule import AssignmentCreateIn, ScheduleCreateIn
from signage_cms.services.schedules import ScheduleManager

logger = logging.getLogger(__name__)

DEMO_SUBDOMAIN = "demo"


def seed(database: Database | None = None) -> dict[str, int]:
    """Customer with two sites: an all-day customer schedule and a business-hours site A schedule.

    Returns the created ids, or an empty dict when the demo customer already exists.
    """
    database = database or Database()
    database.create_all()
    db: Session = database.session()
    try:
        if db.query(Customer.id).filter(Customer.subdomain == DEMO_SUBDOMAIN).first():
            logger.info("Demo customer already present, skipping seed")
            return {}

        customer = Customer(name="Demo Retail", subdomain=DEMO_SUBDOMAIN)
        db.add(customer)
        db.commit()
        db.refresh(customer)

        layout_default = Layout(customer_id=customer.id, name="All Day Branding")
        layout_promo = Layout(customer_id=customer.id, name="Store Hours Promo")
        db.add_all([layout_default, layout_promo])
        db.commit()

        site_a = Site(customer_id=customer.id, name="Site A", site_code="A", time_zone="UTC")
        site_b = Site(customer_id=customer.id, name="Site B", site_code="B", time_zone="UTC")
        db.add_all([site_a, site_b])
        db.commit()

        players = [
            Player(site_id=site_a.id, name="P1", player_code="P1"),
            Player(site_id=site_a.id, name="P2", player_code="P2"),
            Player(site_id=site_b.id, name="P3", player_code="P3"),
        ]
        db.add_all(players)
        db.commit()

        manager = ScheduleManager(db)
        all_day = manager.create(
            customer.id,
            ScheduleCreateIn(name="S1 all day", layout_id=layout_default.id, priority=50),
        )
        manager.create_assignment(
            all_day.id,
            customer.id,
            AssignmentCreateIn(assignment_type="Customer", target_customer_id=customer.id),
        )
        store_hours = manager.create(
            customer.id,
            ScheduleCreateIn(
                name="S2 site A store hours",
                layout_id=layout_promo.id,
                priority=80,
                start_time="09:00:00",
                end_time="17:00:00",
            ),
        )
        manager.create_assignment(
            store_hours.id,
            customer.id,
            AssignmentCreateIn(assignment_type="Site", target_site_id=site_a.id),
        )
        return {
            "customer_id": customer.id,
            "site_a_id": site_a.id,
            "site_b_id": site_b.id,
            "layout_l1_id": layout_default.id,
            "layout_l2_id": layout_promo.id,
            "schedule_s1_id": all_day.id,
            "schedule_s2_id": store_hours.id,
            "player_p1_id": players[0].id,
            "player_p2_id": players[1].id,
            "player_p3_id": players[2].id,
        }
    finally:
        db.close()


if __name__ == "__main__":
    seed()
