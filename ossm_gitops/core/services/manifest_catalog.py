"""Manifest catalog — the fixed, ordered set of templates.

Bodies are literal YAML.  The only placeholder markers are
``{repo_url}`` and ``{observability_namespace}``; they are filled by
``manifest_generate.render_template`` with ``str.format``.
"""

from __future__ import annotations

from ossm_gitops.core.models.generator import GeneratorConfig
from ossm_gitops.core.models.template import ManifestTemplate

# ── Layout ──────────────────────────────────────────────────────

OBSERVABILITY_DIR = "infra/observability/base"
OSSM_DIR = "infra/ossm/base"
BOOKINFO_DIR = "apps/bookinfo/base"
GATEWAY_DIR = "apps/bookinfo/gateway"
BOOTSTRAP_DIR = "bootstrap"

DIRECTORIES = (
    BOOTSTRAP_DIR,
    OSSM_DIR,
    OBSERVABILITY_DIR,
    BOOKINFO_DIR,
    GATEWAY_DIR,
)

# Fetched verbatim, never templated
PASSTHROUGH_PATH = f"{BOOKINFO_DIR}/bookinfo-deployment.yaml"

SECTIONS: dict[str, str] = {
    "ossm": "Generating Service Mesh 3.2 Config",
    "observability": "Generating Observability Config (Tempo + MinIO + Kiali)",
    "bookinfo": "Generating Bookinfo + Gateway API",
    "bootstrap": "Generating ArgoCD Bootstrap",
}


def _kustomization(resources: list[str]) -> str:
    lines = [
        "apiVersion: kustomize.config.k8s.io/v1beta1",
        "kind: Kustomization",
        "resources:",
    ]
    lines.extend(f"  - {name}" for name in resources)
    return "\n".join(lines) + "\n"


def _namespace(name: str, labels: dict[str, str] | None = None) -> str:
    body = f"apiVersion: v1\nkind: Namespace\nmetadata:\n  name: {name}\n"
    if labels:
        body += "  labels:\n"
        body += "".join(f"    {key}: {value}\n" for key, value in labels.items())
    return body


# ── Observability (Tempo + MinIO + Kiali + Grafana) ─────────────

_MINIO = """apiVersion: apps/v1
kind: Deployment
metadata:
  name: minio
  namespace: {observability_namespace}
spec:
  selector:
    matchLabels:
      app: minio
  strategy:
    type: Recreate
  template:
    metadata:
      labels:
        app: minio
    spec:
      containers:
      - name: minio
        image: quay.io/minio/minio:latest
        args: ["server", "/data", "--console-address", ":9001"]
        env:
        - name: MINIO_ROOT_USER
          value: "minio"
        - name: MINIO_ROOT_PASSWORD
          value: "minio123"
        ports:
        - containerPort: 9000
---
apiVersion: v1
kind: Service
metadata:
  name: minio
  namespace: {observability_namespace}
spec:
  ports:
  - port: 9000
    protocol: TCP
    targetPort: 9000
  selector:
    app: minio
---
apiVersion: v1
kind: Secret
metadata:
  name: tempostack-dev-minio
  namespace: {observability_namespace}
stringData:
  bucket: tempo
  endpoint: http://minio.{observability_namespace}.svc.cluster.local:9000
  access_key_id: minio
  access_key_secret: minio123
type: Opaque
"""

_TEMPO = """apiVersion: tempo.grafana.com/v1alpha1
kind: TempoStack
metadata:
  name: tempo
  namespace: {observability_namespace}
spec:
  storage:
    secret:
      name: tempostack-dev-minio
      type: s3
  storageSize: 1Gi
  resources:
    total:
      limits:
        memory: 2Gi
        cpu: 2000m
  template:
    queryFrontend:
      jaegerQuery:
        enabled: true
"""

_GRAFANA_DATASOURCE = """apiVersion: grafana.integreatly.org/v1beta1
kind: GrafanaDatasource
metadata:
  name: tempo-datasource
  namespace: {observability_namespace}
spec:
  datasource:
    name: Tempo
    type: tempo
    access: proxy
    url: http://tempo-query-frontend.{observability_namespace}.svc.cluster.local:3200
    jsonData:
      httpMethod: GET
      serviceMap:
        datasourceUid: prometheus
  instanceSelector:
    matchLabels:
      dashboards: "grafana" # Adjust this label if your Grafana CR uses a different selector
"""

# Assumes the Kiali operator is installed; this configures the instance.
_KIALI = """apiVersion: kiali.io/v1alpha1
kind: Kiali
metadata:
  name: kiali
  namespace: istio-system
spec:
  auth:
    strategy: anonymous # For Lab ease
  deployment:
    accessible_namespaces: ["**"]
  external_services:
    tracing:
      enabled: true
      use_grpc: true
      in_cluster_url: "http://tempo-query-frontend.{observability_namespace}.svc.cluster.local:16685"
      url: ""
"""

# ── Service Mesh 3.2 (Sail) ─────────────────────────────────────

_ISTIO = """apiVersion: sailoperator.io/v1alpha1
kind: Istio
metadata:
  name: default
  namespace: istio-system
spec:
  version: v1.20.0 # Adjust based on your Sail operator version
  namespace: istio-system
  values:
    meshConfig:
      enableTracing: true
      extensionProviders:
      - name: tempo
        opentelemetry:
          port: 4317
          service: tempo-distributor.{observability_namespace}.svc.cluster.local
      defaultConfig:
        tracing:
          sampling: 100.0
"""

_TELEMETRY = """apiVersion: telemetry.istio.io/v1
kind: Telemetry
metadata:
  name: mesh-tracing
  namespace: istio-system
spec:
  tracing:
  - providers:
    - name: tempo
"""

# ── Bookinfo Gateway API ────────────────────────────────────────

_GATEWAY = """apiVersion: gateway.networking.k8s.io/v1beta1
kind: Gateway
metadata:
  name: bookinfo-gateway
  namespace: bookinfo
spec:
  gatewayClassName: istio
  listeners:
  - name: http
    port: 80
    protocol: HTTP
    allowedRoutes:
      namespaces:
        from: Same
"""

_HTTPROUTE = """apiVersion: gateway.networking.k8s.io/v1beta1
kind: HTTPRoute
metadata:
  name: bookinfo
  namespace: bookinfo
spec:
  parentRefs:
  - name: bookinfo-gateway
  rules:
  - matches:
    - path:
        type: PathPrefix
        value: /productpage
    - path:
        type: PathPrefix
        value: /static
    - path:
        type: PathPrefix
        value: /login
    - path:
        type: PathPrefix
        value: /logout
    - path:
        type: PathPrefix
        value: /api/v1/products
    backendRefs:
    - name: productpage
      port: 9080
"""

# Sail names the Gateway's Service "<gateway-name>-istio".
_OPENSHIFT_ROUTE = """apiVersion: route.openshift.io/v1
kind: Route
metadata:
  name: bookinfo-gateway
  namespace: bookinfo
spec:
  port:
    targetPort: 80
  to:
    kind: Service
    name: bookinfo-gateway-istio # Sail usually appends -istio
    weight: 100
  wildcardPolicy: None
"""

# ── Argo CD app of apps ─────────────────────────────────────────

_APPLICATION = """apiVersion: argoproj.io/v1alpha1
kind: Application
metadata:
  name: {name}
  namespace: openshift-gitops
spec:
  project: default
  source:
    repoURL: '{{repo_url}}'
    targetRevision: HEAD
    path: {path}
  destination:
    server: https://kubernetes.default.svc
    namespace: {namespace}
  syncPolicy:
    automated:
      prune: true
      selfHeal: true
"""

_CREATE_NAMESPACE = """    syncOptions:
      - CreateNamespace=true
"""

# (name, source path, destination namespace, create namespace)
_APPLICATIONS = (
    ("bootstrap-cluster", BOOTSTRAP_DIR, "openshift-gitops", False),
    ("infra-observability", OBSERVABILITY_DIR, "{observability_namespace}", True),
    ("infra-ossm", OSSM_DIR, "istio-system", True),
    ("app-bookinfo", BOOKINFO_DIR, "bookinfo", True),
    ("app-bookinfo-gateway", GATEWAY_DIR, "bookinfo", False),
)


def _app_of_apps() -> str:
    docs = []
    for name, path, namespace, create_ns in _APPLICATIONS:
        doc = _APPLICATION.format(name=name, path=path, namespace=namespace)
        if create_ns:
            doc += _CREATE_NAMESPACE
        docs.append(doc)
    return "---\n".join(docs)


# ── Catalog ─────────────────────────────────────────────────────


def build_catalog(config: GeneratorConfig) -> list[ManifestTemplate]:
    """Return the ordered template catalog for ``config``.

    Only ``config.grafana_datasource`` changes the catalog shape; the
    substitution values are applied later at render time.

    Every Namespace manifest comes before the manifests placed in that
    namespace, which is why the mesh section (``istio-system``, also home
    of the Kiali CR) is written first.
    """
    ossm = [
        ManifestTemplate(
            path=f"{OSSM_DIR}/kustomization.yaml",
            body=_kustomization(["namespace.yaml", "istio.yaml", "telemetry.yaml"]),
            section="ossm",
            reason="Kustomization for the service mesh control plane",
        ),
        ManifestTemplate(
            path=f"{OSSM_DIR}/namespace.yaml",
            body=_namespace("istio-system"),
            section="ossm",
            reason="Mesh control plane namespace",
        ),
        ManifestTemplate(
            path=f"{OSSM_DIR}/istio.yaml",
            body=_ISTIO,
            section="ossm",
            reason="Istio control plane with Tempo extension provider",
        ),
        ManifestTemplate(
            path=f"{OSSM_DIR}/telemetry.yaml",
            body=_TELEMETRY,
            section="ossm",
            reason="Mesh-wide tracing telemetry rule",
        ),
    ]

    # The datasource is listed last in the kustomization
    resources = ["namespace.yaml", "minio.yaml", "tempo.yaml", "kiali-config.yaml"]
    if config.grafana_datasource:
        resources.append("grafana-datasource.yaml")

    observability = [
        ("kustomization.yaml", _kustomization(resources),
         "Kustomization for the observability tier"),
        ("namespace.yaml", _namespace("{observability_namespace}"),
         "Observability namespace"),
        ("minio.yaml", _MINIO, "MinIO object store (Deployment + Service + Secret)"),
        ("tempo.yaml", _TEMPO, "TempoStack tracing backend"),
    ]
    if config.grafana_datasource:
        observability.append(
            ("grafana-datasource.yaml", _GRAFANA_DATASOURCE, "Grafana datasource for Tempo")
        )
    observability.append(("kiali-config.yaml", _KIALI, "Kiali tracing integration"))

    bookinfo = [
        ManifestTemplate(
            path=f"{BOOKINFO_DIR}/kustomization.yaml",
            body=_kustomization(["namespace.yaml", "bookinfo-deployment.yaml"]),
            section="bookinfo",
            reason="Kustomization for the Bookinfo application",
        ),
        ManifestTemplate(
            path=f"{BOOKINFO_DIR}/namespace.yaml",
            body=_namespace("bookinfo", {"istio.io/rev": "default"}),
            section="bookinfo",
            reason="Bookinfo namespace with sidecar injection",
        ),
        ManifestTemplate(
            path=f"{GATEWAY_DIR}/kustomization.yaml",
            body=_kustomization(["gateway.yaml", "httproute.yaml", "openshift-route.yaml"]),
            section="bookinfo",
            reason="Kustomization for the Bookinfo entrypoint",
        ),
        ManifestTemplate(
            path=f"{GATEWAY_DIR}/gateway.yaml",
            body=_GATEWAY,
            section="bookinfo",
            reason="Gateway API listener",
        ),
        ManifestTemplate(
            path=f"{GATEWAY_DIR}/httproute.yaml",
            body=_HTTPROUTE,
            section="bookinfo",
            reason="HTTPRoute to productpage",
        ),
        ManifestTemplate(
            path=f"{GATEWAY_DIR}/openshift-route.yaml",
            body=_OPENSHIFT_ROUTE,
            section="bookinfo",
            reason="OpenShift Route exposing the gateway",
        ),
    ]

    bootstrap = [
        ManifestTemplate(
            path=f"{BOOTSTRAP_DIR}/app-of-apps.yaml",
            body=_app_of_apps(),
            section="bootstrap",
            reason="Argo CD app of apps (5 applications)",
        ),
    ]

    return (
        ossm
        + [
            ManifestTemplate(
                path=f"{OBSERVABILITY_DIR}/{name}",
                body=body,
                section="observability",
                reason=reason,
            )
            for name, body, reason in observability
        ]
        + bookinfo
        + bootstrap
    )
