from __future__ import annotations

from slackmeet.db import Base, engine, get_database_url


def main() -> None:
    Base.metadata.create_all(bind=engine)
    print(f"created tables on {get_database_url()}")


if __name__ == "__main__":
    main()
