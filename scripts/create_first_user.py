import argparse
import logging

from sqlmodel import Session

from agrocoop.core.logging import setup_logging
from agrocoop.db.session import engine, init_db
from agrocoop.services.accounts import sign_up

logger = logging.getLogger("create_first_user")


def create_initial_company(company_name: str, email: str, password: str, full_name: str) -> bool:
    init_db()
    with Session(engine) as session:
        result = sign_up(session, {
            "company_name": company_name,
            "email": email,
            "password": password,
            "full_name": full_name,
        })
    if not result.success:
        logger.error("Sign-up failed: %s %s", result.error, result.field_errors or "")
        return False
    logger.info("Created company %s (%s) with admin %s", company_name, result.company_id, email)
    return True


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Create a company and its first admin user.")
    parser.add_argument("--company", default="Demo Cooperative")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--password", default="adminpassword")
    parser.add_argument("--name", default="Coop Admin")
    args = parser.parse_args()
    raise SystemExit(0 if create_initial_company(args.company, args.email, args.password, args.name) else 1)
