# scripts/seed_mock_data.py

import asyncio
import random
from typing import Optional

import typer

from app.core.database import create_db_and_tables, get_async_session_context
from app.core.tasks import bootstrap_database

cli = typer.Typer()


@cli.command()
def main(
    seed: Optional[int] = typer.Option(
        None, '--seed', '-s',
        help="난수 시드. 지정하면 같은 모의 데이터를 다시 생성할 수 있습니다."
    ),
):
    """
    기본 유닛/관리자를 구성한 뒤 최근 30일치 모의 측정 데이터를 생성합니다.
    측정값이 이미 있으면 아무것도 생성하지 않습니다.
    """
    from app.domains.dpm import tasks as dpm_tasks

    async def run_seeding() -> int:
        await create_db_and_tables()
        async with get_async_session_context() as db:
            await bootstrap_database(db, seed_defaults=True, seed_mock=False)
            return await dpm_tasks.seed_mock_data(db, rng=random.Random(seed))

    created = asyncio.run(run_seeding())
    typer.echo(f"생성된 측정값: {created}개")


if __name__ == "__main__":
    cli()
