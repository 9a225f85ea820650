"""Run the DateCreated Fixer host: `python -m datefix_backend`."""
from aiohttp import web

from .app import create_app
from .config import HTTP_HOST, HTTP_PORT


def main() -> None:
    web.run_app(create_app(), host=HTTP_HOST, port=HTTP_PORT)


if __name__ == "__main__":
    main()
