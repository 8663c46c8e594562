import json

from services.bible.app.domain.handoff import (
    determine_metric_type,
    determine_priority,
    determine_severity,
    generate_handoff,
)
from services.bible.app.domain.serialization import to_document
from services.bible.app.domain.types import PhaseArtifact

NOW = 1_700_000_000_000


def _artifacts(**phases):
    return {
        phase.replace("_", "-"): PhaseArtifact(phase=phase.replace("_", "-"), content=content)
        for phase, content in phases.items()
    }


def test_kill_test_with_bare_string_conditions():
    payload = generate_handoff(
        _artifacts(kill_test={"killConditions": ["Revenue < $10k for 3 months"]}), "run-1", now=NOW
    )

    conditions = payload.validation.kill_conditions
    assert len(conditions) == 1
    assert conditions[0].condition == "Revenue < $10k for 3 months"
    assert conditions[0].severity == "major"


def test_empty_input_keeps_every_field():
    document = to_document(generate_handoff({}, "run-empty", now=NOW))

    assert list(document) == ["metadata", "product", "technical", "business", "execution", "validation"]
    assert document["metadata"] == {
        "generatedAt": NOW,
        "planningRunId": "run-empty",
        "confidence": 0,
        "completeness": 0,
    }
    assert document["product"] == {"vision": "", "features": [], "mvpScope": []}
    assert document["technical"] == {
        "architecture": {"services": [], "cloudflareStack": [], "dataModel": {"entities": [], "relationships": []}},
        "api": {"endpoints": [], "authentication": {"type": "jwt"}},
    }
    assert document["business"] == {"model": "Unknown", "pricing": [], "metrics": []}
    assert document["execution"] == {"tasks": [], "dependencies": [], "milestones": []}
    assert document["validation"] == {"killConditions": [], "assumptions": []}


def test_vision_fallback_chain():
    only_opportunity = generate_handoff(_artifacts(opportunity={"keyInsight": "Insight"}), "r", now=NOW)
    with_synthesis = generate_handoff(
        _artifacts(opportunity={"keyInsight": "Insight"}, synthesis={"executiveSummary": "Summary"}), "r", now=NOW
    )
    with_design = generate_handoff(
        _artifacts(
            opportunity={"keyInsight": "Insight"},
            synthesis={"executiveSummary": "Summary"},
            product_design={"vision": ""},
        ),
        "r",
        now=NOW,
    )

    assert only_opportunity.product.vision == "Insight"
    assert with_synthesis.product.vision == "Summary"
    assert with_design.product.vision == "Summary"


def test_features_and_mvp_scope():
    payload = generate_handoff(
        _artifacts(
            product_design={
                "appPages": [
                    {"title": "Dashboard", "purpose": "Overview", "priority": "P0"},
                    {"description": "Untitled"},
                    "skip me",
                ],
                "mvpScope": {"core": "Auth", "extra": 3, "billing": "Stripe"},
            },
            task_reconciliation={
                "tasks": [
                    {"id": "fe-1", "title": "Build nav", "category": "frontend", "priority": "low"},
                    {"title": "No id", "category": "frontend"},
                    {"id": "be-1", "category": "backend"},
                ]
            },
            strategy={"thesis": "Win SMBs"},
        ),
        "r",
        now=NOW,
    )

    features = payload.product.features
    assert [(f.id, f.name, f.priority) for f in features] == [
        ("feature-page-0", "Dashboard", "high"),
        ("feature-page-1", "Page 2", "medium"),
        ("fe-1", "Build nav", "low"),
        ("feature-task-1", "No id", "medium"),
    ]
    assert features[0].description == "Overview"
    assert payload.product.mvp_scope == ["Auth", "Stripe", "Strategic Thesis: Win SMBs"]


def test_technical_architecture():
    tech_arch = {
        "workflows": [{"name": "IngestWorkflow"}, "ReportWorkflow", 7],
        "durableObjects": ["RoomDO"],
        "sveltekitRoutes": ["/", "/app", "/settings"],
        "wranglerChanges": {
            "kv_namespaces": [{"binding": "CACHE"}, {}],
            "d1_databases": [{"binding": "DB_MAIN"}],
            "r2_buckets": "nope",
            "queues": [{"binding": "JOBS"}],
            "ai": {"binding": "AI"},
        },
        "databaseSchema": {
            "tables": [
                {
                    "name": "users",
                    "columns": [
                        {"name": "id", "type": "integer", "notNull": True},
                        {"name": "email", "required": True},
                        {"name": "bio", "required": "yes"},
                    ],
                },
                {"columns": "bad"},
            ],
            "relationships": [
                {"from": "users", "to": "posts", "type": "one-to-many"},
                {"from": "users", "to": "teams", "type": "Many To Many"},
                {"from": "users", "to": "profiles", "type": "weird"},
                {"from": "orphans"},
            ],
        },
        "apiRoutes": [
            {"path": "/api/items", "method": "post", "description": "Create"},
            {"method": "TRACE"},
            "DELETE /api/items/:id",
            "/api/health",
        ],
        "authFlowDecisions": {"method": "JWT via Clerk", "provider": "clerk"},
    }

    technical = generate_handoff(_artifacts(tech_arch=tech_arch), "r", now=NOW).technical

    services = technical.architecture.services
    assert [(s.name, s.type) for s in services] == [
        ("IngestWorkflow", "worker"),
        ("ReportWorkflow", "worker"),
        ("RoomDO", "durable-object"),
        ("SvelteKit Pages Application", "pages"),
    ]
    assert services[0].description == "Temporal workflow"
    assert services[-1].description == "SvelteKit application with 3 routes"

    assert [(b.name, b.type) for b in technical.architecture.cloudflare_stack] == [
        ("CACHE", "kv"),
        ("KV", "kv"),
        ("DB_MAIN", "d1"),
        ("JOBS", "queue"),
        ("AI", "ai"),
    ]

    entities = technical.architecture.data_model.entities
    assert [e.name for e in entities] == ["users", "unknown"]
    assert [(f.name, f.type, f.required) for f in entities[0].fields] == [
        ("id", "integer", True),
        ("email", "text", True),
        ("bio", "text", False),
    ]
    assert entities[1].fields == []
    relationships = technical.architecture.data_model.relationships
    assert [(r.from_entity, r.to, r.type) for r in relationships] == [
        ("users", "posts", "one-to-many"),
        ("users", "teams", "many-to-many"),
        ("users", "profiles", "one-to-many"),
    ]
    assert to_document(relationships[0]) == {"from": "users", "to": "posts", "type": "one-to-many"}

    assert [(e.method, e.path) for e in technical.api.endpoints] == [
        ("POST", "/api/items"),
        ("GET", "/api/unknown"),
        ("DELETE", "/api/items/:id"),
        ("GET", "/api/health"),
    ]
    assert technical.api.authentication.type == "jwt"
    assert technical.api.authentication.provider == "clerk"


def test_auth_types():
    def auth(decisions):
        return generate_handoff(_artifacts(tech_arch={"authFlowDecisions": decisions}), "r", now=NOW).technical.api.authentication

    assert auth({"type": "Session cookies", "provider": "x"}).type == "session"
    assert auth({"type": "Session cookies", "provider": "x"}).provider is None
    assert auth({"type": "apikey"}).type == "api-key"
    assert auth({"type": "public"}).type == "none"
    assert auth({"type": "magic links"}).type == "jwt"
    assert auth({"provider": "auth0"}).provider is None


def test_business_group():
    payload = generate_handoff(
        _artifacts(
            business_model={"revenueModel": "usage", "pricingTiers": [{"name": "Pro", "price": 29, "features": ["A", 1]}, "Free"]},
            revenue_expansion={"primaryModel": "ignored", "tiers": [{"name": "Never used"}]},
            analytics={
                "kpis": [{"name": "MRR", "type": "gauge"}, "Signups"],
                "dashboardMetrics": [{"name": "Latency", "type": "distribution"}],
            },
            gtm_marketing={"successMetrics": [{"name": "MRR"}, {"name": "CAC", "target": "< $50"}, {"target": "x"}]},
        ),
        "r",
        now=NOW,
    )

    business = payload.business
    assert business.model == "usage"
    assert [(t.name, t.price, t.features) for t in business.pricing] == [("Pro", 29, ["A"]), ("Free", 0, [])]
    assert [(m.name, m.type) for m in business.metrics] == [
        ("MRR", "gauge"),
        ("Signups", "counter"),
        ("Latency", "histogram"),
        ("CAC", "gauge"),
    ]
    assert business.metrics[-1].description == "< $50"


def test_revenue_expansion_pricing_is_only_a_fallback():
    payload = generate_handoff(
        _artifacts(revenue_expansion={"primaryModel": "marketplace", "pricingTiers": [{"name": "Seller", "price": 9.5}]}),
        "r",
        now=NOW,
    )

    assert payload.business.model == "marketplace"
    assert [(t.name, t.price) for t in payload.business.pricing] == [("Seller", 9.5)]


def test_empty_revenue_tiers_array_shadows_pricing_tiers():
    payload = generate_handoff(
        _artifacts(revenue_expansion={"tiers": [], "pricingTiers": [{"name": "Pro"}]}),
        "r",
        now=NOW,
    )

    assert payload.business.pricing == []


def test_null_revenue_tiers_fall_through_to_pricing_tiers():
    payload = generate_handoff(
        _artifacts(revenue_expansion={"tiers": None, "pricingTiers": [{"name": "Pro"}]}),
        "r",
        now=NOW,
    )

    assert [t.name for t in payload.business.pricing] == ["Pro"]


def test_execution_group():
    payload = generate_handoff(
        _artifacts(
            task_reconciliation={
                "tasks": [
                    {"id": "t-1", "title": "Schema", "sourcePhase": "tech-arch"},
                    {"id": "t-2", "title": "API", "category": "backend", "dependencies": ["t-1", 3]},
                    {"title": "Orphan", "dependencies": ["t-1"]},
                ],
                "marketingTasks": [{"title": "Launch post"}],
                "buildPhases": [{"id": 1, "name": "Foundation"}, {"name": "Polish"}, {"id": 3}],
            },
            launch_execution={
                "ninetyDayPlan": {"milestones": [{"name": "Beta", "date": "Day 30", "criteria": ["10 users", None]}, {}]}
            },
        ),
        "r",
        now=NOW,
    )

    execution = payload.execution
    assert [(t.id, t.title, t.phase) for t in execution.tasks] == [
        ("t-1", "Schema", "tech-arch"),
        ("t-2", "API", "backend"),
        ("task-2", "Orphan", "unknown"),
        ("marketing-task-3", "Launch post", "marketing"),
    ]
    assert [(d.task, d.depends_on) for d in execution.dependencies] == [("t-2", ["t-1"])]
    assert to_document(execution.dependencies[0]) == {"task": "t-2", "dependsOn": ["t-1"]}
    assert [(m.name, m.target, m.criteria) for m in execution.milestones] == [
        ("Foundation", "Complete Build Phase 1", ["All tasks in Foundation completed"]),
        ("Polish", "Complete Build Phase", ["All tasks in Polish completed"]),
        ("Beta", "Day 30", ["10 users"]),
        ("Unnamed Milestone", "", []),
    ]


def test_validation_assumptions_are_deduplicated():
    payload = generate_handoff(
        _artifacts(
            kill_test={
                "killConditions": [{"description": "Churn > 10%", "severity": "P0 blocking"}, {"condition": "Low NPS", "severity": "low"}],
                "assumptions": [{"assumption": "SMBs pay", "test": "Pilot"}, "Teams adopt"],
            },
            strategy={"assumptions": ["Teams adopt", {"description": "Partners resell", "validation": "LOIs"}, {"x": 1}]},
        ),
        "r",
        now=NOW,
    )

    validation = payload.validation
    assert [(c.condition, c.severity) for c in validation.kill_conditions] == [
        ("Churn > 10%", "critical"),
        ("Low NPS", "minor"),
    ]
    assert [(a.assumption, a.validation) for a in validation.assumptions] == [
        ("SMBs pay", "Pilot"),
        ("Teams adopt", ""),
        ("Partners resell", "LOIs"),
    ]


def test_metadata_confidence_and_completeness():
    artifacts = {
        "opportunity": PhaseArtifact(phase="opportunity", overall_score=80),
        "phase-7-strategy": PhaseArtifact(phase="strategy", overall_score=85),
        "strategy": PhaseArtifact(phase="strategy", overall_score=90),
        "synthesis": PhaseArtifact(phase="synthesis"),
        "custom-phase": PhaseArtifact(phase="custom-phase", overall_score=10),
    }

    metadata = generate_handoff(artifacts, "run-9", now=NOW).metadata

    # opportunity 80, strategy 90, custom 10
    assert metadata.confidence == 60
    # three recognized phases out of sixteen
    assert metadata.completeness == 19
    assert metadata.planning_run_id == "run-9"


def test_completeness_is_capped():
    artifacts = {phase: PhaseArtifact(phase=phase) for phase in ("opportunity", "strategy", "synthesis")}

    assert generate_handoff(artifacts, "r", now=NOW, total_phases=2).metadata.completeness == 100


def test_generation_is_deterministic():
    artifacts = _artifacts(opportunity={"keyInsight": "Insight"}, kill_test={"killConditions": ["x"]})

    first = json.dumps(to_document(generate_handoff(artifacts, "r", now=NOW)))
    second = json.dumps(to_document(generate_handoff(artifacts, "r", now=NOW)))

    assert first == second


def test_classification_ladders():
    assert determine_priority("Critical path") == "high"
    assert determine_priority("p3") == "low"
    assert determine_priority(None) == "medium"
    assert determine_severity("Blocking") == "critical"
    assert determine_severity("anything") == "major"
    assert determine_metric_type("Conversion rate") == "gauge"
    assert determine_metric_type("count") == "counter"
