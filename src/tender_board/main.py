"""Command-line entry point: print the eligible projects and their photos."""

import asyncio

from tender_board.app_logging import configure_logging
from tender_board.config import Settings
from tender_board.containers import build_container


async def run(settings: Settings | None = None) -> list[str]:
    """Load the home view once and return one display line per project."""
    container = build_container(settings)
    try:
        home = container.home
        cycle = await home.load()
        await cycle.settle()
        lines = [
            f"Project {project.id}: {len(home.photos_for(project.id))} photo(s)"
            for project in home.projects
        ]
        summary = cycle.summary()
        if summary.failed:
            lines.append(f"{summary.failed} of {summary.total} photo lookups failed")
        return lines
    finally:
        await container.close_resources()


def main() -> None:
    """Run the home view load and print its result."""
    settings = Settings()
    configure_logging(debug=settings.debug)
    print("Tender Board")
    for line in asyncio.run(run(settings)):
        print(line)


if __name__ == "__main__":
    main()
