"""
Demo risk table — canned failure-mode templates keyed by component keyword.

Used when no Anthropic credential is configured. Component keywords are the
lower-cased labels produced by analyzer.extract_components(); keywords that
are not in COMPONENT_RISKS contribute no failure modes. GENERAL_RISKS apply to
every architecture regardless of the detected components.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional


@dataclass(frozen=True)
class RiskTemplate:
    failure_mode: str
    effect: str
    cause: str
    severity: int
    occurrence: int
    detection: int
    category: str
    tactical_mitigation: tuple[str, ...]
    strategic_mitigation: tuple[str, ...]
    component: Optional[str] = None  # fixed label, general risks only


_WEB_APP = (
    RiskTemplate(
        failure_mode="Session management failure",
        effect="Users logged out unexpectedly, lost work",
        cause="Session timeout misconfiguration or token expiration",
        severity=6, occurrence=5, detection=4,
        category="Authentication",
        tactical_mitigation=("Review session timeout settings", "Add session warning notifications"),
        strategic_mitigation=("Implement sliding session expiration", "Add session persistence layer"),
    ),
)

_FRONTEND = (
    RiskTemplate(
        failure_mode="JavaScript bundle too large",
        effect="Slow page loads, poor user experience",
        cause="Unoptimized dependencies and no code splitting",
        severity=5, occurrence=6, detection=3,
        category="Performance",
        tactical_mitigation=("Analyze bundle with webpack-analyzer", "Remove unused dependencies"),
        strategic_mitigation=("Implement code splitting", "Add CDN for static assets"),
    ),
    RiskTemplate(
        failure_mode="No client-side error reporting",
        effect="Broken pages go unnoticed until users complain",
        cause="Browser exceptions are not collected",
        severity=5, occurrence=5, detection=9,
        category="Observability",
        tactical_mitigation=("Add a global window.onerror handler", "Log failed API calls from the client"),
        strategic_mitigation=("Adopt real user monitoring", "Alert on client error rate"),
    ),
)

_API = (
    RiskTemplate(
        failure_mode="Rate limiting not implemented",
        effect="API overwhelmed, service degradation for all users",
        cause="Missing rate limiting middleware",
        severity=8, occurrence=4, detection=6,
        category="Availability",
        tactical_mitigation=("Add basic IP-based rate limiting", "Monitor request volumes"),
        strategic_mitigation=("Implement tiered rate limiting", "Add API gateway with throttling"),
    ),
    RiskTemplate(
        failure_mode="No request timeout configured",
        effect="Thread pool exhaustion, cascading failures",
        cause="Long-running requests holding connections",
        severity=7, occurrence=5, detection=7,
        category="Availability",
        tactical_mitigation=("Add timeout middleware", "Set database query timeouts"),
        strategic_mitigation=("Implement circuit breakers", "Add request deadline propagation"),
    ),
)

_BACKEND = (
    RiskTemplate(
        failure_mode="Unhandled exception crashes service",
        effect="Complete service outage until restart",
        cause="Missing global error handler",
        severity=9, occurrence=3, detection=5,
        category="Availability",
        tactical_mitigation=("Add global exception handler", "Implement graceful shutdown"),
        strategic_mitigation=("Add process supervisor", "Implement health checks with auto-restart"),
    ),
    RiskTemplate(
        failure_mode="Downstream dependency outage",
        effect="Requests fail while a third-party service is down",
        cause="Synchronous calls without fallbacks",
        severity=7, occurrence=4, detection=5,
        category="Dependencies",
        tactical_mitigation=("Inventory external dependencies", "Add timeouts to outbound calls"),
        strategic_mitigation=("Add fallbacks and graceful degradation", "Queue non-critical calls"),
    ),
    RiskTemplate(
        failure_mode="Memory leak in long-running workers",
        effect="Gradual slowdown followed by out-of-memory kills",
        cause="Unbounded in-process caches or retained references",
        severity=6, occurrence=4, detection=6,
        category="Performance",
        tactical_mitigation=("Track process memory over time", "Schedule rolling restarts"),
        strategic_mitigation=("Add memory profiling to load tests", "Bound in-process caches"),
    ),
)

_DATABASE = (
    RiskTemplate(
        failure_mode="Single database instance (no replication)",
        effect="Complete data loss if instance fails",
        cause="No high availability configuration",
        severity=10, occurrence=2, detection=8,
        category="Data Integrity",
        tactical_mitigation=("Enable automated backups", "Document recovery procedure"),
        strategic_mitigation=("Configure read replicas", "Implement multi-region deployment"),
    ),
    RiskTemplate(
        failure_mode="Connection pool exhaustion",
        effect="New requests fail, service degradation",
        cause="Connection leaks or undersized pool",
        severity=8, occurrence=4, detection=5,
        category="Availability",
        tactical_mitigation=("Monitor connection pool metrics", "Review connection lifecycle"),
        strategic_mitigation=("Implement connection pool sizing automation", "Add circuit breaker"),
    ),
)

_DB = (
    RiskTemplate(
        failure_mode="No query performance monitoring",
        effect="Slow queries degrade overall performance",
        cause="Missing query analysis tooling",
        severity=6, occurrence=6, detection=8,
        category="Observability",
        tactical_mitigation=("Enable slow query logging", "Review top queries manually"),
        strategic_mitigation=("Implement APM with query tracing", "Add automated index recommendations"),
    ),
    RiskTemplate(
        failure_mode="Schema migration locks tables",
        effect="Writes blocked during deployment",
        cause="Blocking DDL run against large tables",
        severity=7, occurrence=3, detection=5,
        category="Availability",
        tactical_mitigation=("Review migrations for locking DDL", "Run migrations off-peak"),
        strategic_mitigation=("Adopt online schema change tooling", "Use expand-and-contract migrations"),
    ),
)

_CACHE = (
    RiskTemplate(
        failure_mode="Cache invalidation failure",
        effect="Stale data shown to users",
        cause="Missing or incorrect cache invalidation logic",
        severity=6, occurrence=5, detection=6,
        category="Data Integrity",
        tactical_mitigation=("Review cache TTL settings", "Add manual cache clear endpoint"),
        strategic_mitigation=("Implement event-driven cache invalidation", "Add cache versioning"),
    ),
)

_REDIS = (
    RiskTemplate(
        failure_mode="Redis memory exhaustion",
        effect="Cache evictions, performance degradation",
        cause="No memory limits or eviction policy",
        severity=7, occurrence=4, detection=5,
        category="Performance",
        tactical_mitigation=("Set maxmemory limit", "Configure eviction policy"),
        strategic_mitigation=("Implement cache tiering", "Add memory usage alerting"),
    ),
)

_KEY_VAULT = (
    RiskTemplate(
        failure_mode="Secret expiration not monitored",
        effect="Service outage when credentials expire",
        cause="No alerting on secret expiry dates",
        severity=9, occurrence=4, detection=7,
        category="Configuration",
        tactical_mitigation=("Document all secret expiry dates", "Set calendar reminders"),
        strategic_mitigation=("Implement automated secret rotation", "Add expiry monitoring alerts"),
    ),
)

_SECRETS = (
    RiskTemplate(
        failure_mode="Secrets in environment variables",
        effect="Credentials leaked in logs or crash dumps",
        cause="Insecure secret storage pattern",
        severity=9, occurrence=3, detection=8,
        category="Security",
        tactical_mitigation=("Audit logging for secret exposure", "Rotate exposed credentials"),
        strategic_mitigation=("Migrate to secret manager", "Implement secret scanning in CI"),
    ),
    RiskTemplate(
        failure_mode="Secrets committed to source control",
        effect="Credentials exposed to anyone with repository access",
        cause="No pre-commit secret scanning",
        severity=9, occurrence=2, detection=6,
        category="Security",
        tactical_mitigation=("Scan repository history for secrets", "Rotate any exposed credentials"),
        strategic_mitigation=("Add pre-commit secret hooks", "Block pushes containing secrets"),
    ),
)

_QUEUE = (
    RiskTemplate(
        failure_mode="Poison message blocks consumers",
        effect="Message processing stalls, backlog grows unbounded",
        cause="No dead-letter queue or retry limit",
        severity=7, occurrence=4, detection=6,
        category="Availability",
        tactical_mitigation=("Configure a dead-letter queue", "Alert on queue depth"),
        strategic_mitigation=("Add idempotent consumers with bounded retries", "Implement backpressure"),
    ),
    RiskTemplate(
        failure_mode="Duplicate message delivery",
        effect="Orders or records processed twice",
        cause="At-least-once delivery without idempotency keys",
        severity=6, occurrence=5, detection=7,
        category="Data Integrity",
        tactical_mitigation=("Log message IDs on consumption", "Add duplicate detection report"),
        strategic_mitigation=("Introduce idempotency keys", "Adopt transactional outbox pattern"),
    ),
)

_LOAD_BALANCER = (
    RiskTemplate(
        failure_mode="Load balancer single point of failure",
        effect="All inbound traffic dropped",
        cause="Single load balancer instance without failover",
        severity=9, occurrence=2, detection=4,
        category="Networking",
        tactical_mitigation=("Document manual failover steps", "Monitor load balancer health"),
        strategic_mitigation=("Deploy redundant load balancers", "Use managed multi-zone load balancing"),
    ),
    RiskTemplate(
        failure_mode="TLS certificate expiry",
        effect="Clients reject connections, site unreachable",
        cause="Manual certificate renewal",
        severity=8, occurrence=3, detection=4,
        category="Networking",
        tactical_mitigation=("List certificate expiry dates", "Alert 30 days before expiry"),
        strategic_mitigation=("Automate certificate renewal", "Add synthetic TLS checks"),
    ),
)

_STORAGE = (
    RiskTemplate(
        failure_mode="Public access on storage bucket",
        effect="Sensitive files exposed to the internet",
        cause="Permissive bucket policy or ACL",
        severity=9, occurrence=3, detection=7,
        category="Security",
        tactical_mitigation=("Audit bucket access policies", "Block public access at account level"),
        strategic_mitigation=("Enforce policy-as-code for storage", "Add continuous configuration scanning"),
    ),
    RiskTemplate(
        failure_mode="No object versioning or lifecycle policy",
        effect="Accidental deletes are unrecoverable",
        cause="Versioning disabled on buckets",
        severity=7, occurrence=3, detection=6,
        category="Data Integrity",
        tactical_mitigation=("Enable versioning on critical buckets", "Restrict delete permissions"),
        strategic_mitigation=("Add lifecycle and retention policies", "Replicate buckets across regions"),
    ),
)

_CANONICAL: dict[str, tuple[RiskTemplate, ...]] = {
    "web app": _WEB_APP,
    "frontend": _FRONTEND,
    "api": _API,
    "backend": _BACKEND,
    "database": _DATABASE,
    "db": _DB,
    "cache": _CACHE,
    "redis": _REDIS,
    "key vault": _KEY_VAULT,
    "secrets": _SECRETS,
    "queue": _QUEUE,
    "load balancer": _LOAD_BALANCER,
    "storage": _STORAGE,
}

# Other keywords the extractor recognises, mapped to the group they share.
_ALIASES = {
    "webapp": "web app",
    "ui": "frontend",
    "rest api": "api",
    "restapi": "api",
    "graphql": "api",
    "postgres": "database",
    "mysql": "database",
    "mongodb": "database",
    "documentdb": "database",
    "memcached": "cache",
    "keyvault": "key vault",
    "hsm": "key vault",
    "rabbitmq": "queue",
    "kafka": "queue",
    "sqs": "queue",
    "loadbalancer": "load balancer",
    "lb": "load balancer",
    "nginx": "load balancer",
    "haproxy": "load balancer",
    "blob": "storage",
    "s3": "storage",
}

COMPONENT_RISKS = MappingProxyType({
    **_CANONICAL,
    **{alias: _CANONICAL[target] for alias, target in _ALIASES.items()},
})

GENERAL_RISKS: tuple[RiskTemplate, ...] = (
    RiskTemplate(
        component="Infrastructure",
        failure_mode="No centralized logging",
        effect="Unable to diagnose issues, extended MTTR",
        cause="Logs scattered across multiple systems",
        severity=6, occurrence=5, detection=7,
        category="Observability",
        tactical_mitigation=("Set up log aggregation", "Standardize log format"),
        strategic_mitigation=("Implement ELK/Datadog/similar", "Add log-based alerting"),
    ),
    RiskTemplate(
        component="Monitoring",
        failure_mode="Missing health check endpoints",
        effect="Load balancer routes traffic to unhealthy instances",
        cause="No health check implementation",
        severity=7, occurrence=4, detection=6,
        category="Availability",
        tactical_mitigation=("Add basic /health endpoint", "Configure load balancer health checks"),
        strategic_mitigation=("Implement deep health checks", "Add dependency health verification"),
    ),
    RiskTemplate(
        component="Deployment",
        failure_mode="No rollback procedure",
        effect="Extended outage during bad deployments",
        cause="Missing deployment automation",
        severity=8, occurrence=3, detection=5,
        category="Availability",
        tactical_mitigation=("Document manual rollback steps", "Keep previous version artifacts"),
        strategic_mitigation=("Implement blue-green deployments", "Add automated rollback triggers"),
    ),
)

DEMO_RECOMMENDATIONS: tuple[str, ...] = (
    "Prioritize fixing Critical and Medium priority risks within this quarter",
    "Implement centralized observability to improve detection scores",
    "Review single points of failure and add redundancy",
    "Document runbooks for top 5 failure modes",
    "Schedule quarterly pre-mortem reviews to track progress",
)
