"""Build handoff: the execution payload consumed by the downstream build agent.

Every group and every list in the payload is always present; a missing phase
or a malformed field only leaves the corresponding value empty or defaulted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .aggregator import epoch_ms
from .keywords import (
    AUTH_TYPE_LADDER,
    METRIC_TYPE_LADDER,
    PRIORITY_LADDER,
    SEVERITY_LADDER,
    classify,
)
from .normalizer import ArtifactsInput, artifacts_to_map
from .phases import normalize_planning_phase
from .types import PhaseArtifact
from .values import as_list, as_mapping, as_number, as_str, first_str, percentage, round_half_up, str_items

DEFAULT_TOTAL_PHASES = 16

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")
RELATIONSHIP_TYPES = ("one-to-one", "one-to-many", "many-to-many")

# wrangler config key -> (binding type, fallback binding name)
_WRANGLER_BINDINGS: tuple[tuple[str, str, str], ...] = (
    ("kv_namespaces", "kv", "KV"),
    ("d1_databases", "d1", "DB"),
    ("r2_buckets", "r2", "BUCKET"),
    ("queues", "queue", "QUEUE"),
)


@dataclass(frozen=True)
class FeatureSpec:
    id: str
    name: str
    description: str
    priority: str


@dataclass(frozen=True)
class ServiceSpec:
    name: str
    type: str
    description: str


@dataclass(frozen=True)
class CloudflareBinding:
    name: str
    type: str


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: str
    required: bool


@dataclass(frozen=True)
class Entity:
    name: str
    fields: list[FieldSpec] = field(default_factory=list)


@dataclass(frozen=True)
class Relationship:
    from_entity: str = field(metadata={"alias": "from"})
    to: str
    type: str


@dataclass(frozen=True)
class DataModelSpec:
    entities: list[Entity] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)


@dataclass(frozen=True)
class APIEndpoint:
    path: str
    method: str
    description: str


@dataclass(frozen=True)
class AuthSpec:
    type: str
    provider: str | None = None


@dataclass(frozen=True)
class PricingTier:
    name: str
    price: float
    features: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MetricDefinition:
    name: str
    description: str
    type: str


@dataclass(frozen=True)
class TaskSpec:
    id: str
    title: str
    description: str
    phase: str


@dataclass(frozen=True)
class TaskDependency:
    task: str
    depends_on: list[str]


@dataclass(frozen=True)
class Milestone:
    name: str
    target: str
    criteria: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class KillCondition:
    condition: str
    severity: str


@dataclass(frozen=True)
class Assumption:
    assumption: str
    validation: str


@dataclass(frozen=True)
class PayloadMetadata:
    generated_at: int
    planning_run_id: str
    confidence: int
    completeness: int


@dataclass(frozen=True)
class ProductGroup:
    vision: str
    features: list[FeatureSpec]
    mvp_scope: list[str]


@dataclass(frozen=True)
class ArchitectureGroup:
    services: list[ServiceSpec]
    cloudflare_stack: list[CloudflareBinding]
    data_model: DataModelSpec


@dataclass(frozen=True)
class ApiGroup:
    endpoints: list[APIEndpoint]
    authentication: AuthSpec


@dataclass(frozen=True)
class TechnicalGroup:
    architecture: ArchitectureGroup
    api: ApiGroup


@dataclass(frozen=True)
class BusinessGroup:
    model: str
    pricing: list[PricingTier]
    metrics: list[MetricDefinition]


@dataclass(frozen=True)
class ExecutionGroup:
    tasks: list[TaskSpec]
    dependencies: list[TaskDependency]
    milestones: list[Milestone]


@dataclass(frozen=True)
class ValidationGroup:
    kill_conditions: list[KillCondition]
    assumptions: list[Assumption]


@dataclass(frozen=True)
class ExecutionPayload:
    metadata: PayloadMetadata
    product: ProductGroup
    technical: TechnicalGroup
    business: BusinessGroup
    execution: ExecutionGroup
    validation: ValidationGroup


def determine_priority(text: str | None) -> str:
    return classify(text, PRIORITY_LADDER, "medium")


def determine_severity(text: str | None) -> str:
    return classify(text, SEVERITY_LADDER, "major")


def determine_metric_type(text: str | None) -> str:
    return classify(text, METRIC_TYPE_LADDER, "counter")


def _objects(value: Any) -> list[Mapping[str, Any]]:
    return [item for item in as_list(value) if isinstance(item, Mapping)]


# Product


def extract_vision(product_design: Mapping[str, Any], synthesis: Mapping[str, Any], opportunity: Mapping[str, Any]) -> str:
    return (
        as_str(product_design.get("vision"))
        or as_str(synthesis.get("executiveSummary"))
        or as_str(opportunity.get("keyInsight"))
        or ""
    )


def extract_features(product_design: Mapping[str, Any], task_recon: Mapping[str, Any]) -> list[FeatureSpec]:
    features: list[FeatureSpec] = []
    for i, page in enumerate(as_list(product_design.get("appPages"))):
        if not isinstance(page, Mapping):
            continue
        features.append(
            FeatureSpec(
                id=f"feature-page-{i}",
                name=first_str(page, "title", "name") or f"Page {i + 1}",
                description=first_str(page, "description", "purpose") or "",
                priority=determine_priority(as_str(page.get("priority"))),
            )
        )

    frontend = [task for task in _objects(task_recon.get("tasks")) if task.get("category") == "frontend"]
    for i, task in enumerate(frontend):
        features.append(
            FeatureSpec(
                id=as_str(task.get("id")) or f"feature-task-{i}",
                name=as_str(task.get("title")) or "",
                description=as_str(task.get("description")) or "",
                priority=determine_priority(as_str(task.get("priority"))),
            )
        )
    return features


def extract_mvp_scope(product_design: Mapping[str, Any], strategy: Mapping[str, Any]) -> list[str]:
    scope: list[str] = []
    raw = product_design.get("mvpScope")
    if isinstance(raw, str):
        if raw:
            scope.append(raw)
    elif isinstance(raw, Mapping):
        scope.extend(value for value in raw.values() if isinstance(value, str))
    else:
        scope.extend(str_items(raw))

    thesis = as_str(strategy.get("thesis"))
    if thesis:
        scope.append(f"Strategic Thesis: {thesis}")
    return scope


# Technical


def extract_services(tech_arch: Mapping[str, Any]) -> list[ServiceSpec]:
    services: list[ServiceSpec] = []
    for workflow in as_list(tech_arch.get("workflows")):
        if isinstance(workflow, Mapping):
            services.append(
                ServiceSpec(
                    name=as_str(workflow.get("name")) or "Unnamed Workflow",
                    type="worker",
                    description=as_str(workflow.get("description")) or "Temporal workflow",
                )
            )
        elif isinstance(workflow, str):
            services.append(ServiceSpec(name=workflow, type="worker", description="Temporal workflow"))

    for durable in as_list(tech_arch.get("durableObjects")):
        if isinstance(durable, Mapping):
            services.append(
                ServiceSpec(
                    name=as_str(durable.get("name")) or "Unnamed Durable Object",
                    type="durable-object",
                    description=as_str(durable.get("description")) or "Durable Object",
                )
            )
        elif isinstance(durable, str):
            services.append(ServiceSpec(name=durable, type="durable-object", description="Durable Object"))

    routes = as_list(tech_arch.get("sveltekitRoutes"))
    if routes:
        services.append(
            ServiceSpec(
                name="SvelteKit Pages Application",
                type="pages",
                description=f"SvelteKit application with {len(routes)} routes",
            )
        )
    return services


def extract_cloudflare_bindings(tech_arch: Mapping[str, Any]) -> list[CloudflareBinding]:
    wrangler = as_mapping(tech_arch.get("wranglerChanges"))
    bindings: list[CloudflareBinding] = []
    for key, binding_type, fallback in _WRANGLER_BINDINGS:
        for entry in _objects(wrangler.get(key)):
            bindings.append(CloudflareBinding(name=as_str(entry.get("binding")) or fallback, type=binding_type))
    if wrangler.get("ai"):
        bindings.append(CloudflareBinding(name="AI", type="ai"))
    return bindings


def _relationship_type(value: Any) -> str:
    text = as_str(value)
    if text is None:
        return "one-to-many"
    lowered = text.lower().replace("_", "-").replace(" ", "-")
    return lowered if lowered in RELATIONSHIP_TYPES else "one-to-many"


def extract_data_model(tech_arch: Mapping[str, Any]) -> DataModelSpec:
    schema = as_mapping(tech_arch.get("databaseSchema"))
    entities = []
    for table in _objects(schema.get("tables")):
        columns = [
            FieldSpec(
                name=as_str(column.get("name")) or "",
                type=as_str(column.get("type")) or "text",
                required=column.get("required") is True or column.get("notNull") is True,
            )
            for column in _objects(table.get("columns"))
        ]
        entities.append(Entity(name=as_str(table.get("name")) or "unknown", fields=columns))

    relationships = []
    for relation in _objects(schema.get("relationships")):
        source = as_str(relation.get("from"))
        target = as_str(relation.get("to"))
        if source is None or target is None:
            continue
        relationships.append(
            Relationship(from_entity=source, to=target, type=_relationship_type(relation.get("type")))
        )
    return DataModelSpec(entities=entities, relationships=relationships)


def _http_method(value: Any) -> str:
    method = (as_str(value) or "").upper()
    return method if method in HTTP_METHODS else "GET"


def extract_endpoints(tech_arch: Mapping[str, Any]) -> list[APIEndpoint]:
    endpoints: list[APIEndpoint] = []
    for route in as_list(tech_arch.get("apiRoutes")):
        if isinstance(route, Mapping):
            endpoints.append(
                APIEndpoint(
                    path=as_str(route.get("path")) or "/api/unknown",
                    method=_http_method(route.get("method")),
                    description=as_str(route.get("description")) or "",
                )
            )
        elif isinstance(route, str):
            parts = route.split(" ")
            if len(parts) == 2:
                endpoints.append(APIEndpoint(path=parts[1], method=_http_method(parts[0]), description=""))
            else:
                endpoints.append(APIEndpoint(path=route, method="GET", description=""))
    return endpoints


def extract_auth(tech_arch: Mapping[str, Any]) -> AuthSpec:
    auth = as_mapping(tech_arch.get("authFlowDecisions"))
    declared = first_str(auth, "type", "method")
    # provider is only meaningful for an explicitly declared JWT flow
    if declared is not None and "jwt" in declared.lower():
        return AuthSpec(type="jwt", provider=as_str(auth.get("provider")))
    return AuthSpec(type=classify(declared, AUTH_TYPE_LADDER, "jwt"))


# Business


def extract_business_model(business_model: Mapping[str, Any], revenue_expansion: Mapping[str, Any]) -> str:
    return (
        first_str(business_model, "modelType", "revenueModel")
        or as_str(revenue_expansion.get("primaryModel"))
        or "Unknown"
    )


def _pricing_tier(tier: Mapping[str, Any]) -> PricingTier:
    return PricingTier(
        name=as_str(tier.get("name")) or "Unnamed Tier",
        price=as_number(tier.get("price")) or 0,
        features=str_items(tier.get("features")),
    )


def extract_pricing_tiers(business_model: Mapping[str, Any], revenue_expansion: Mapping[str, Any]) -> list[PricingTier]:
    tiers: list[PricingTier] = []
    for tier in as_list(business_model.get("pricingTiers")):
        if isinstance(tier, Mapping):
            tiers.append(_pricing_tier(tier))
        elif isinstance(tier, str):
            tiers.append(PricingTier(name=tier, price=0))
    if tiers:
        return tiers

    # revenue-expansion tiers are only a fallback
    # an empty "tiers" array still shadows "pricingTiers"
    fallback = revenue_expansion.get("tiers")
    if not isinstance(fallback, (list, tuple, Mapping)) and not fallback:
        fallback = revenue_expansion.get("pricingTiers")
    return [_pricing_tier(tier) for tier in _objects(fallback)]


def extract_metrics(analytics: Mapping[str, Any], gtm: Mapping[str, Any]) -> list[MetricDefinition]:
    metrics: list[MetricDefinition] = []
    for kpi in as_list(analytics.get("kpis")):
        if isinstance(kpi, Mapping):
            metrics.append(
                MetricDefinition(
                    name=as_str(kpi.get("name")) or "Unnamed KPI",
                    description=as_str(kpi.get("description")) or "",
                    type=determine_metric_type(as_str(kpi.get("type"))),
                )
            )
        elif isinstance(kpi, str):
            metrics.append(MetricDefinition(name=kpi, description="", type="counter"))

    for metric in _objects(analytics.get("dashboardMetrics")):
        metrics.append(
            MetricDefinition(
                name=as_str(metric.get("name")) or "Unnamed Metric",
                description=as_str(metric.get("description")) or "",
                type=determine_metric_type(as_str(metric.get("type"))),
            )
        )

    seen = {metric.name for metric in metrics}
    for metric in _objects(gtm.get("successMetrics")):
        name = as_str(metric.get("name"))
        if name is None or name in seen:
            continue
        seen.add(name)
        metrics.append(
            MetricDefinition(name=name, description=first_str(metric, "description", "target") or "", type="gauge")
        )
    return metrics


# Execution


def extract_tasks(task_recon: Mapping[str, Any]) -> list[TaskSpec]:
    tasks: list[TaskSpec] = []
    for task in _objects(task_recon.get("tasks")):
        tasks.append(
            TaskSpec(
                id=as_str(task.get("id")) or f"task-{len(tasks)}",
                title=as_str(task.get("title")) or "Unnamed Task",
                description=as_str(task.get("description")) or "",
                phase=first_str(task, "sourcePhase", "category") or "unknown",
            )
        )
    for task in _objects(task_recon.get("marketingTasks")):
        tasks.append(
            TaskSpec(
                id=as_str(task.get("id")) or f"marketing-task-{len(tasks)}",
                title=as_str(task.get("title")) or "Unnamed Marketing Task",
                description=as_str(task.get("description")) or "",
                phase="marketing",
            )
        )
    return tasks


def extract_dependencies(task_recon: Mapping[str, Any]) -> list[TaskDependency]:
    dependencies = []
    for task in _objects(task_recon.get("tasks")):
        task_id = as_str(task.get("id"))
        depends_on = str_items(task.get("dependencies"))
        if task_id and depends_on:
            dependencies.append(TaskDependency(task=task_id, depends_on=depends_on))
    return dependencies


def extract_milestones(task_recon: Mapping[str, Any], launch_execution: Mapping[str, Any]) -> list[Milestone]:
    milestones: list[Milestone] = []
    for build_phase in _objects(task_recon.get("buildPhases")):
        name = as_str(build_phase.get("name"))
        if name is None:
            continue
        phase_id = build_phase.get("id")
        suffix = "" if phase_id in (None, "", 0, False) else str(phase_id)
        milestones.append(
            Milestone(
                name=name,
                target=f"Complete Build Phase {suffix}".strip(),
                criteria=[f"All tasks in {name} completed"],
            )
        )

    plan = as_mapping(launch_execution.get("ninetyDayPlan"))
    for milestone in _objects(plan.get("milestones")):
        milestones.append(
            Milestone(
                name=as_str(milestone.get("name")) or "Unnamed Milestone",
                target=first_str(milestone, "target", "date") or "",
                criteria=str_items(milestone.get("criteria")),
            )
        )
    return milestones


# Validation


def extract_kill_conditions(kill_test: Mapping[str, Any]) -> list[KillCondition]:
    conditions = []
    for condition in as_list(kill_test.get("killConditions")):
        if isinstance(condition, Mapping):
            conditions.append(
                KillCondition(
                    condition=first_str(condition, "condition", "description") or "",
                    severity=determine_severity(as_str(condition.get("severity"))),
                )
            )
        elif isinstance(condition, str):
            conditions.append(KillCondition(condition=condition, severity="major"))
    return conditions


def extract_assumptions(kill_test: Mapping[str, Any], strategy: Mapping[str, Any]) -> list[Assumption]:
    assumptions: list[Assumption] = []
    for item in as_list(kill_test.get("assumptions")):
        if isinstance(item, Mapping):
            assumptions.append(
                Assumption(
                    assumption=first_str(item, "assumption", "description") or "",
                    validation=first_str(item, "validation", "test") or "",
                )
            )
        elif isinstance(item, str):
            assumptions.append(Assumption(assumption=item, validation=""))

    seen = {assumption.assumption for assumption in assumptions}
    for item in as_list(strategy.get("assumptions")):
        if isinstance(item, Mapping):
            text = first_str(item, "assumption", "description")
            validation = as_str(item.get("validation")) or ""
        elif isinstance(item, str):
            text, validation = item, ""
        else:
            continue
        if not text or text in seen:
            continue
        seen.add(text)
        assumptions.append(Assumption(assumption=text, validation=validation))
    return assumptions


# Metadata


def average_confidence(artifacts: Mapping[str, PhaseArtifact]) -> int:
    scores = [artifact.overall_score for artifact in artifacts.values() if artifact.overall_score is not None]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def total_completeness(artifacts: Mapping[str, PhaseArtifact], total_phases: int = DEFAULT_TOTAL_PHASES) -> int:
    recognized = {normalize_planning_phase(phase) for phase in artifacts} - {None}
    return min(100, percentage(len(recognized), total_phases))


def generate_handoff(
    artifacts: ArtifactsInput,
    run_id: str,
    now: int | None = None,
    total_phases: int = DEFAULT_TOTAL_PHASES,
) -> ExecutionPayload:
    """Assemble the execution payload for ``run_id`` from its phase artifacts."""
    keyed = artifacts_to_map(artifacts)

    def content(phase: str) -> Mapping[str, Any]:
        artifact = keyed.get(phase)
        return artifact.content if artifact is not None else {}

    opportunity = content("opportunity")
    strategy = content("strategy")
    business_model = content("business-model")
    revenue_expansion = content("revenue-expansion")
    product_design = content("product-design")
    tech_arch = content("tech-arch")
    gtm = content("gtm-marketing")
    analytics = content("analytics")
    launch_execution = content("launch-execution")
    kill_test = content("kill-test")
    synthesis = content("synthesis")
    task_recon = content("task-reconciliation")

    return ExecutionPayload(
        metadata=PayloadMetadata(
            generated_at=epoch_ms() if now is None else now,
            planning_run_id=run_id,
            confidence=average_confidence(keyed),
            completeness=total_completeness(keyed, total_phases),
        ),
        product=ProductGroup(
            vision=extract_vision(product_design, synthesis, opportunity),
            features=extract_features(product_design, task_recon),
            mvp_scope=extract_mvp_scope(product_design, strategy),
        ),
        technical=TechnicalGroup(
            architecture=ArchitectureGroup(
                services=extract_services(tech_arch),
                cloudflare_stack=extract_cloudflare_bindings(tech_arch),
                data_model=extract_data_model(tech_arch),
            ),
            api=ApiGroup(endpoints=extract_endpoints(tech_arch), authentication=extract_auth(tech_arch)),
        ),
        business=BusinessGroup(
            model=extract_business_model(business_model, revenue_expansion),
            pricing=extract_pricing_tiers(business_model, revenue_expansion),
            metrics=extract_metrics(analytics, gtm),
        ),
        execution=ExecutionGroup(
            tasks=extract_tasks(task_recon),
            dependencies=extract_dependencies(task_recon),
            milestones=extract_milestones(task_recon, launch_execution),
        ),
        validation=ValidationGroup(
            kill_conditions=extract_kill_conditions(kill_test),
            assumptions=extract_assumptions(kill_test, strategy),
        ),
    )


__all__ = [
    "APIEndpoint",
    "Assumption",
    "AuthSpec",
    "CloudflareBinding",
    "DataModelSpec",
    "Entity",
    "ExecutionPayload",
    "FeatureSpec",
    "FieldSpec",
    "KillCondition",
    "MetricDefinition",
    "Milestone",
    "PricingTier",
    "Relationship",
    "ServiceSpec",
    "TaskDependency",
    "TaskSpec",
    "average_confidence",
    "determine_metric_type",
    "determine_priority",
    "determine_severity",
    "generate_handoff",
    "total_completeness",
]
