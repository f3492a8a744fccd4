"""BDD step definitions for reporter export features."""

import asyncio
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from cloudmetrics.core.models import Datum, RegistrySnapshot
from cloudmetrics.core.reporter import MetricsReporter, ReporterBuilder, TickResult
from tests.fakes import FIXED_TIMESTAMP, FailingIngestionClient, FakeCounter, FakeGauge


@dataclass
class ReporterScenarioContext:
    """Shared state between steps in a reporter scenario."""

    client: FailingIngestionClient = field(default_factory=FailingIngestionClient)
    builder: ReporterBuilder = field(default_factory=ReporterBuilder)
    namespace: str = ""
    reporter: MetricsReporter | None = None
    snapshot: RegistrySnapshot = field(default_factory=RegistrySnapshot)
    counters: dict[str, FakeCounter] = field(default_factory=dict)
    results: list[TickResult] = field(default_factory=list)

    def get_reporter(self) -> MetricsReporter:
        # Built lazily so Given steps can keep configuring the builder.
        if self.reporter is None:
            self.reporter = self.builder.build(self.client, self.namespace)
        return self.reporter

    def sent(self) -> list[list[Datum]]:
        return [batch for _, batch in self.client.calls]


@pytest.fixture
def ctx() -> ReporterScenarioContext:
    """Fresh scenario context for each test."""
    return ReporterScenarioContext()


# === Background Steps ===
@given("an in-memory ingestion client")
def step_ingestion_client(ctx: ReporterScenarioContext) -> None:
    ctx.client = FailingIngestionClient()


@given(parsers.parse('a reporter for namespace "{namespace}"'))
def step_reporter(ctx: ReporterScenarioContext, namespace: str) -> None:
    ctx.namespace = namespace
    ctx.builder.with_clock(lambda: FIXED_TIMESTAMP)


# === Setup Steps ===
@given(parsers.parse("a registry with {n:d} gauges"))
def step_gauges(ctx: ReporterScenarioContext, n: int) -> None:
    ctx.snapshot = RegistrySnapshot(gauges={f"g{i:02d}": FakeGauge(i) for i in range(n)})


@given(parsers.parse('a counter "{name}" at {count:d}'))
def step_counter(ctx: ReporterScenarioContext, name: str, count: int) -> None:
    ctx.counters[name] = FakeCounter(count)
    ctx.snapshot = RegistrySnapshot(counters=ctx.counters)


@given(parsers.parse("the ingestion client rejects request {n:d}"))
def step_reject(ctx: ReporterScenarioContext, n: int) -> None:
    ctx.client.fail_on.add(n - 1)


@given("the reporter is disabled")
def step_disabled(ctx: ReporterScenarioContext) -> None:
    ctx.builder.set_enabled(False)


@given(parsers.parse('a duplicating processor that appends "{suffix}" to names'))
def step_duplicator(ctx: ReporterScenarioContext, suffix: str) -> None:
    ctx.builder.duplicating_processors([lambda d: {d.with_name(d.name + suffix)}])


# === Action Steps ===
@when("one reporting tick runs")
def step_tick(ctx: ReporterScenarioContext) -> None:
    ctx.results.append(asyncio.run(ctx.get_reporter().report(ctx.snapshot)))


@when(parsers.parse('the counter "{name}" advances to {count:d}'))
def step_advance(ctx: ReporterScenarioContext, name: str, count: int) -> None:
    ctx.counters[name].count = count


# === Assertion Steps ===
@then(parsers.parse("{n:d} requests are sent"))
def step_requests_sent(ctx: ReporterScenarioContext, n: int) -> None:
    assert len(ctx.client.calls) == n


@then(parsers.parse("{n:d} requests are accepted"))
def step_requests_accepted(ctx: ReporterScenarioContext, n: int) -> None:
    assert len(ctx.client.accepted) == n


@then(parsers.parse("the request sizes are {a:d}, {b:d} and {c:d}"))
def step_request_sizes(ctx: ReporterScenarioContext, a: int, b: int, c: int) -> None:
    assert sorted(len(batch) for batch in ctx.sent()) == sorted([a, b, c])


@then(parsers.parse('every request targets namespace "{namespace}"'))
def step_namespace(ctx: ReporterScenarioContext, namespace: str) -> None:
    assert {ns for ns, _ in ctx.client.calls} == {namespace}


@then(parsers.parse("the tick reports {n:d} failed batch"))
def step_failed(ctx: ReporterScenarioContext, n: int) -> None:
    assert ctx.results[-1].failed == n


@then(parsers.parse("the tick holds {n:d} datums"))
def step_tick_datums(ctx: ReporterScenarioContext, n: int) -> None:
    assert len(ctx.results[-1].datums) == n


@then(parsers.parse('the exported values of "{name}" are {first:d} and {second:d}'))
def step_values(ctx: ReporterScenarioContext, name: str, first: int, second: int) -> None:
    values = [d.value for batch in ctx.sent() for d in batch if d.name == name]
    assert values == [first, second]


@then(parsers.parse('the exported names are "{first}" and "{second}"'))
def step_names(ctx: ReporterScenarioContext, first: str, second: str) -> None:
    names = sorted(d.name for batch in ctx.sent() for d in batch)
    assert names == sorted([first, second])
