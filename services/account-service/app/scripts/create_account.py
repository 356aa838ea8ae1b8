"""Script to register an author account."""
import argparse
import getpass
import sys

from psycopg_pool import ConnectionPool

from app.config import get_settings
from app.domain.service import AccountService
from app.repository import AccountRepository
from app.security.passwords import BcryptPasswordEncoder


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create an author account")
    parser.add_argument("--username", required=True, help="Username the author logs in with")
    parser.add_argument("--password", help="Password; prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    pool = ConnectionPool(get_settings().database_url)
    try:
        service = AccountService(AccountRepository(pool), BcryptPasswordEncoder())
        try:
            account = service.create_account(args.username, password)
        except ValueError as exc:
            print(exc)
            sys.exit(1)
        print(f"Created account '{account.username}' with ID {account.account_id}")
    finally:
        pool.close()


if __name__ == "__main__":
    main()
