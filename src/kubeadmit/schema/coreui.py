#!/usr/bin/env python3
"""
KUBEADMIT SCHEMA - CoreUI
-------------------------
Field tree for the CoreUI microservice resource, plus the starter template
offered to users who begin from text instead of the form.

Author: KubeAdmit Team
Date: 2026-10-18
"""

from kubeadmit.core.models import FieldSpec, FieldType, ResourceKind

COREUI_API_VERSION = "microservice.alveotech.com/v1alpha1"
COREUI_KIND = "CoreUI"
INGRESS_CLASS_ANNOTATION = {"kubernetes.io/ingress.class": "nginx"}

PORT_MIN, PORT_MAX = 1, 65535

COREUI = ResourceKind(
    kind=COREUI_KIND,
    api_version=COREUI_API_VERSION,
    fields=(
        FieldSpec("apiVersion", FieldType.STRING, required=True, choices=(COREUI_API_VERSION,)),
        FieldSpec("kind", FieldType.STRING, required=True, choices=(COREUI_KIND,)),
        FieldSpec("metadata", FieldType.OBJECT, required=True, fields=(
            FieldSpec("name", FieldType.STRING, required=True),
            FieldSpec("namespace", FieldType.STRING, required=True),
        )),
        FieldSpec("spec", FieldType.OBJECT, required=True, fields=(
            FieldSpec("replicas", FieldType.INTEGER, required=True, default=1, minimum=1),
            FieldSpec("image", FieldType.STRING, required=True),
            FieldSpec("service", FieldType.OBJECT, required=True, fields=(
                FieldSpec("type", FieldType.ENUM, required=True, default="ClusterIP",
                          choices=("ClusterIP", "NodePort", "LoadBalancer")),
                FieldSpec("port", FieldType.INTEGER, required=True, default=80,
                          minimum=PORT_MIN, maximum=PORT_MAX),
                FieldSpec("targetPort", FieldType.INTEGER, required=True, default=8080,
                          minimum=PORT_MIN, maximum=PORT_MAX),
            )),
            # Everything but 'enabled' disappears while the gate is off.
            FieldSpec("ingress", FieldType.OBJECT, gated_by="enabled",
                      injected={"annotations": INGRESS_CLASS_ANNOTATION}, fields=(
                FieldSpec("enabled", FieldType.BOOLEAN, default=False),
                FieldSpec("host", FieldType.STRING, required_when_gated=True),
                FieldSpec("path", FieldType.STRING, default="/", required_when_gated=True),
                FieldSpec("pathType", FieldType.ENUM, default="Prefix", choices=("Prefix", "Exact")),
            )),
        )),
    ),
)

# Starter template for the text editor. The tls block and the rewrite-target
# annotation are not part of the CoreUI schema and get dropped on admission.
DEFAULT_TEMPLATE = """\
apiVersion: microservice.alveotech.com/v1alpha1
kind: CoreUI
metadata:
  name: coreui
  namespace: microservice-operator
spec:
  replicas: 1
  image: ac-m2repo-prod.asset-control.com:5443/core-ui:1.0.9
  service:
    type: ClusterIP
    port: 80
    targetPort: 8080
  ingress:
    enabled: true
    host: "coreui.alveotech.com"
    path: "/"
    pathType: "Prefix"
    annotations:
      kubernetes.io/ingress.class: nginx
      nginx.ingress.kubernetes.io/rewrite-target: /
    tls:
    - secretName: coreui-tls
      hosts:
      - "coreui.alveotech.com"
"""
