"""Timing harness for the batched service listing."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from ops_inventory import schemas
from ops_inventory.database import Database, count_statements
from ops_inventory.models import ProviderType, ServiceType
from ops_inventory.repositories import (
    ProviderRepository,
    ServiceRepository,
    TagRepository,
)

logger = logging.getLogger(__name__)

BENCHMARK_PROVIDER = "Benchmark Provider"


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    """Timings for repeated ``get_services_with_provider`` calls.

    Attributes
    ----------
    service_count : int
        Services returned by each read.
    iterations : int
        Number of timed reads.
    statements_per_read : int
        SQL statements issued by one read.
    min_ms : float
        Fastest read in milliseconds.
    max_ms : float
        Slowest read in milliseconds.
    avg_ms : float
        Mean read time in milliseconds.
    """

    service_count: int
    iterations: int
    statements_per_read: int
    min_ms: float
    max_ms: float
    avg_ms: float

    @property
    def services_per_second(self) -> float:
        """Throughput across all timed reads."""
        total_seconds = self.avg_ms * self.iterations / 1000
        if total_seconds == 0:
            return 0.0
        return self.service_count * self.iterations / total_seconds


async def seed(database: Database, *, service_count: int, tag_count: int) -> int:
    """Create one provider, ``tag_count`` tags and ``service_count`` services.

    Each service gets two or three tags, alternating.

    Returns
    -------
    int
        Identity of the seeded provider.
    """
    providers = ProviderRepository(database)
    services = ServiceRepository(database)
    tags = TagRepository(database)

    provider_id = await providers.create_provider(
        schemas.ProviderCreate(
            name=BENCHMARK_PROVIDER,
            ip="192.168.1.1",
            username="bench",
            password="bench",
            ssh_port=22,
            provider_type=ProviderType.VM,
        )
    )
    tag_ids = [
        await tags.create_tag(schemas.TagCreate(name=f"tag-{i}", color="#000000"))
        for i in range(tag_count)
    ]
    for i in range(service_count):
        wanted = 2 + (i % 2)
        await services.create_service_with_tags(
            schemas.ServiceCreate(
                provider_id=provider_id,
                name=f"service-{i}",
                ip=f"10.0.{i // 256}.{i % 256}",
                status="running",
                service_type=ServiceType.SYSTEMD,
            ),
            [tag_ids[j % tag_count] for j in range(wanted)] if tag_ids else [],
        )
    return provider_id


async def run_benchmark(
    database: Database,
    *,
    service_count: int = 100,
    tag_count: int = 5,
    iterations: int = 10,
) -> BenchmarkResult:
    """Seed ``database`` and time the batched listing.

    Parameters
    ----------
    database : Database
        Initialized store handle; benchmark rows are added to it.
    service_count : int, default=100
        Services to create.
    tag_count : int, default=5
        Tags to create.
    iterations : int, default=10
        Timed reads.

    Returns
    -------
    BenchmarkResult
        Aggregated timings.
    """
    if iterations < 1:
        raise ValueError("iterations must be at least 1")

    await seed(database, service_count=service_count, tag_count=tag_count)
    repository = ServiceRepository(database)

    timings: list[float] = []
    returned = 0
    statements = 0
    for i in range(iterations):
        with count_statements(database) as counter:
            started = time.perf_counter()
            listing = await repository.get_services_with_provider()
            timings.append((time.perf_counter() - started) * 1000)
        if i == 0:
            returned = len(listing)
            statements = counter.count
            logger.info(
                "First read: %.2fms for %d services (%d statements)",
                timings[0],
                returned,
                statements,
            )

    return BenchmarkResult(
        service_count=returned,
        iterations=iterations,
        statements_per_read=statements,
        min_ms=min(timings),
        max_ms=max(timings),
        avg_ms=sum(timings) / len(timings),
    )
