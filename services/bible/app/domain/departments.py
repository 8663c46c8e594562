"""Department view types and the phase-to-department mapping tables.

The bible splits a planning run into fifteen audience-oriented departments. Each
mapping lists the phases a department depends on (used for completeness only)
and the sections it shows, each backed by one or more ``<phase>.<field>`` paths.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

NO_DATA_PLACEHOLDER = "_No data available_"


class DepartmentId(enum.Enum):
    executive = "executive"
    product = "product"
    brand = "brand"
    market = "market"
    customer = "customer"
    revenue = "revenue"
    gtm = "gtm"
    content = "content"
    technical = "technical"
    analytics = "analytics"
    launch = "launch"
    risks = "risks"
    evidence = "evidence"
    agent_json = "agent-json"
    phase_trace = "phase-trace"


# Section content variants, discriminated by ``type``.


@dataclass(frozen=True)
class MarkdownContent:
    text: str
    type: str = field(default="markdown", init=False)


@dataclass(frozen=True)
class TableData:
    headers: list[str]
    rows: list[list[str]]


@dataclass(frozen=True)
class TableContent:
    data: TableData
    type: str = field(default="table", init=False)


@dataclass(frozen=True)
class ListContent:
    items: list[str]
    type: str = field(default="list", init=False)


@dataclass(frozen=True)
class KeyValuePair:
    key: str
    value: str | int | float | bool
    value_type: str | None = field(default=None, metadata={"alias": "type"})


@dataclass(frozen=True)
class KeyValueContent:
    pairs: list[KeyValuePair]
    type: str = field(default="keyValue", init=False)


@dataclass(frozen=True)
class TextBlock:
    content: str
    type: str = field(default="text", init=False)


@dataclass(frozen=True)
class ListBlock:
    items: list[str]
    type: str = field(default="list", init=False)


@dataclass(frozen=True)
class TableBlock:
    data: TableData
    type: str = field(default="table", init=False)


ContentBlock = Union[TextBlock, ListBlock, TableBlock]


@dataclass(frozen=True)
class MixedContent:
    blocks: list[ContentBlock]
    type: str = field(default="mixed", init=False)


SectionContent = Union[MarkdownContent, TableContent, ListContent, KeyValueContent, MixedContent]


@dataclass(frozen=True)
class PhaseSourceReference:
    phase: str
    field: str
    extracted: Any = field(default=None, metadata={"nullable": True})


@dataclass(frozen=True)
class DepartmentSection:
    name: str
    content: SectionContent
    sources: list[PhaseSourceReference]


@dataclass(frozen=True)
class DepartmentView:
    id: DepartmentId
    title: str
    summary: str
    sections: list[DepartmentSection]
    completeness: int
    last_updated: int


@dataclass(frozen=True)
class SectionMapping:
    name: str
    sources: tuple[str, ...]
    # Builds content from the resolved raw values; default rendering applies when unset.
    transform: Callable[[list[Any]], SectionContent] | None = None


@dataclass(frozen=True)
class DepartmentMapping:
    primary_phases: tuple[str, ...] = ()
    secondary_phases: tuple[str, ...] = ()
    sections: tuple[SectionMapping, ...] = ()

    @property
    def all_phases(self) -> tuple[str, ...]:
        return self.primary_phases + self.secondary_phases


@dataclass(frozen=True)
class DepartmentConfig:
    id: DepartmentId
    title: str
    description: str
    icon: str
    color: str


def _section(name: str, *sources: str) -> SectionMapping:
    return SectionMapping(name=name, sources=tuple(sources))


DEPARTMENT_MAPPINGS: Mapping[DepartmentId, DepartmentMapping] = MappingProxyType(
    {
        DepartmentId.executive: DepartmentMapping(
            primary_phases=("synthesis", "strategy", "kill-test"),
            secondary_phases=("opportunity", "business-model"),
            sections=(
                _section("Executive Summary", "synthesis.executiveSummary"),
                _section("Strategic Thesis", "strategy.thesis"),
                _section("Business Model", "business-model.modelType"),
                _section("Go/No-Go Decision", "synthesis.recommendation", "kill-test.verdict"),
            ),
        ),
        DepartmentId.product: DepartmentMapping(
            primary_phases=("product-design", "tech-arch"),
            secondary_phases=("opportunity", "customer-intel"),
            sections=(
                _section("Product Vision", "product-design.vision"),
                _section("Feature Roadmap", "product-design.features"),
                _section("Technical Stack", "tech-arch.stack"),
                _section("MVP Scope", "product-design.mvp"),
            ),
        ),
        DepartmentId.brand: DepartmentMapping(
            primary_phases=("strategy",),
            secondary_phases=("opportunity", "customer-intel"),
            sections=(
                _section("Brand Positioning", "strategy.positioning"),
                _section("Value Proposition", "strategy.valueProposition"),
            ),
        ),
        DepartmentId.market: DepartmentMapping(
            primary_phases=("market-research", "competitive-intel"),
            secondary_phases=("opportunity",),
            sections=(
                _section("Market Size", "market-research.marketSize"),
                _section("Trends", "market-research.trends"),
                _section("Competition", "competitive-intel.competitors"),
            ),
        ),
        DepartmentId.customer: DepartmentMapping(
            primary_phases=("customer-intel",),
            secondary_phases=("opportunity", "market-research"),
            sections=(
                _section("Target Customers", "customer-intel.segments"),
                _section("Personas", "customer-intel.personas"),
                _section("Pain Points", "customer-intel.painPoints"),
            ),
        ),
        DepartmentId.revenue: DepartmentMapping(
            primary_phases=("business-model", "revenue-expansion"),
            secondary_phases=("opportunity",),
            sections=(
                _section("Business Model", "business-model.modelType"),
                _section("Pricing", "business-model.pricingTiers"),
                _section("Revenue Streams", "revenue-expansion.streams"),
            ),
        ),
        DepartmentId.gtm: DepartmentMapping(
            primary_phases=("gtm-marketing",),
            secondary_phases=("customer-intel", "strategy"),
            sections=(
                _section("Marketing Strategy", "gtm-marketing.strategy"),
                _section("Channels", "gtm-marketing.channels"),
                _section("Tactics", "gtm-marketing.tactics"),
            ),
        ),
        DepartmentId.content: DepartmentMapping(
            primary_phases=("content-engine",),
            secondary_phases=("gtm-marketing",),
            sections=(
                _section("Content Strategy", "content-engine.strategy"),
                _section("Workflows", "content-engine.workflows"),
                _section("Distribution", "content-engine.distribution"),
            ),
        ),
        DepartmentId.technical: DepartmentMapping(
            primary_phases=("tech-arch",),
            secondary_phases=("product-design",),
            sections=(
                _section("System Architecture", "tech-arch.architecture"),
                _section("Technology Stack", "tech-arch.stack"),
                _section("Data Model", "tech-arch.dataModel"),
                _section("API Design", "tech-arch.endpoints"),
            ),
        ),
        DepartmentId.analytics: DepartmentMapping(
            primary_phases=("analytics",),
            secondary_phases=("business-model",),
            sections=(
                _section("Key Metrics", "analytics.kpis"),
                _section("Tracking Plan", "analytics.trackingPlan"),
                _section("Dashboards", "analytics.dashboards"),
            ),
        ),
        DepartmentId.launch: DepartmentMapping(
            primary_phases=("launch-execution",),
            secondary_phases=("product-design", "gtm-marketing"),
            sections=(
                _section("Launch Plan", "launch-execution.plan"),
                _section("Milestones", "launch-execution.milestones"),
                _section("Operations", "launch-execution.operations"),
            ),
        ),
        DepartmentId.risks: DepartmentMapping(
            primary_phases=("kill-test",),
            secondary_phases=("synthesis",),
            sections=(
                _section("Risk Factors", "kill-test.risks"),
                _section("Assumptions", "kill-test.assumptions"),
                _section("Kill Conditions", "kill-test.killConditions"),
            ),
        ),
        # Derived from other departments' output; no direct phase mapping.
        DepartmentId.evidence: DepartmentMapping(),
        DepartmentId.agent_json: DepartmentMapping(),
        DepartmentId.phase_trace: DepartmentMapping(),
    }
)


def _config(dept: DepartmentId, title: str, description: str, icon: str, color: str) -> DepartmentConfig:
    return DepartmentConfig(id=dept, title=title, description=description, icon=icon, color=color)


DEPARTMENT_CONFIGS: Mapping[DepartmentId, DepartmentConfig] = MappingProxyType(
    {
        DepartmentId.executive: _config(
            DepartmentId.executive, "Executive Summary", "High-level strategic overview and recommendations", "📊", "blue"
        ),
        DepartmentId.product: _config(
            DepartmentId.product, "Product", "Product vision, features, and roadmap", "📦", "purple"
        ),
        DepartmentId.brand: _config(
            DepartmentId.brand, "Brand & Positioning", "Brand identity, messaging, and market positioning", "✨", "pink"
        ),
        DepartmentId.market: _config(
            DepartmentId.market, "Market Analysis", "Market size, trends, and competitive landscape", "📈", "green"
        ),
        DepartmentId.customer: _config(
            DepartmentId.customer, "Customer Intelligence", "Target customers, personas, and insights", "👥", "cyan"
        ),
        DepartmentId.revenue: _config(
            DepartmentId.revenue, "Revenue & Business Model", "Pricing, revenue streams, and business model", "💰", "yellow"
        ),
        DepartmentId.gtm: _config(
            DepartmentId.gtm, "Go-to-Market", "Marketing strategy, channels, and tactics", "🚀", "orange"
        ),
        DepartmentId.content: _config(
            DepartmentId.content, "Content Engine", "Content strategy, workflows, and distribution", "📝", "teal"
        ),
        DepartmentId.technical: _config(
            DepartmentId.technical, "Technical Architecture", "System design, stack, and infrastructure", "⚙️", "indigo"
        ),
        DepartmentId.analytics: _config(
            DepartmentId.analytics, "Analytics & KPIs", "Metrics, tracking, and success criteria", "📊", "violet"
        ),
        DepartmentId.launch: _config(
            DepartmentId.launch, "Launch & Operations", "Go-live plan, operations, and execution", "🎯", "red"
        ),
        DepartmentId.risks: _config(
            DepartmentId.risks, "Risks & Unknowns", "Risk factors, assumptions, and open questions", "⚠️", "amber"
        ),
        DepartmentId.evidence: _config(
            DepartmentId.evidence, "Evidence Library", "Sources, citations, and supporting data", "📚", "gray"
        ),
        DepartmentId.agent_json: _config(
            DepartmentId.agent_json, "Agent JSON", "Build handoff implementation payload", "🤖", "emerald"
        ),
        DepartmentId.phase_trace: _config(
            DepartmentId.phase_trace, "Phase Trace", "Audit trail of all planning phases", "🔍", "slate"
        ),
    }
)


def department_title(dept: DepartmentId, configs: Mapping[DepartmentId, DepartmentConfig] = DEPARTMENT_CONFIGS) -> str:
    config = configs.get(dept)
    return config.title if config else dept.value


def department_description(
    dept: DepartmentId, configs: Mapping[DepartmentId, DepartmentConfig] = DEPARTMENT_CONFIGS
) -> str:
    config = configs.get(dept)
    return config.description if config else ""


__all__ = [
    "DEPARTMENT_CONFIGS",
    "DEPARTMENT_MAPPINGS",
    "NO_DATA_PLACEHOLDER",
    "ContentBlock",
    "DepartmentConfig",
    "DepartmentId",
    "DepartmentMapping",
    "DepartmentSection",
    "DepartmentView",
    "KeyValueContent",
    "KeyValuePair",
    "ListBlock",
    "ListContent",
    "MarkdownContent",
    "MixedContent",
    "PhaseSourceReference",
    "SectionContent",
    "SectionMapping",
    "TableBlock",
    "TableContent",
    "TableData",
    "TextBlock",
    "department_description",
    "department_title",
]
