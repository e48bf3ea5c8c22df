"""Scalar constants for the monitor.

Label keys, resource names and fixed messages with proper type hints using
Final.
"""

from typing import Final

# ============================================================================
# Application
# ============================================================================

APP_TITLE: Final = "k8s-monitor"

# ============================================================================
# Node labels and annotations
# ============================================================================

NODE_ROLE_LABEL_PREFIX: Final = "node-role.kubernetes.io/"
NODE_ROLE_MASTER: Final = "master"
NODE_ROLE_WORKER: Final = "worker"

NPU_RESOURCE_VENDOR: Final = "huawei.com/"
NPU_RESOURCE_MARKER: Final = "ascend"

NPU_CHIP_NAME_LABEL: Final = "node.kubernetes.io/npu.chip.name"
NPU_DEVICE_TYPE_LABEL: Final = "accelerator/huawei-npu"
NPU_DRIVER_VERSION_LABEL: Final = "os.modelarts.node/npu.firmware.driver.version"
NPU_AICORE_COUNT_LABEL: Final = "npu.huawei.com/aicore-count"
HYPER_NODE_LABEL: Final = "volcano.sh/hypernode"
HYPER_CLUSTER_LABEL: Final = "volcano.sh/hypercluster"
SUPER_POD_LABEL: Final = "os.modelarts.node/superpod.id"
CABINET_LABEL: Final = "cce.kubectl.kubernetes.io/cabinet"

NPU_UTILIZATION_ANNOTATION: Final = "npu.huawei.com/utilization"
NPU_HBM_TOTAL_ANNOTATION: Final = "npu.huawei.com/hbm-total"
NPU_HBM_USED_ANNOTATION: Final = "npu.huawei.com/hbm-used"
NPU_TEMPERATURE_ANNOTATION: Final = "npu.huawei.com/temperature"
NPU_POWER_ANNOTATION: Final = "npu.huawei.com/power"
NPU_HEALTH_ANNOTATION: Final = "npu.huawei.com/health"
NPU_ERROR_COUNT_ANNOTATION: Final = "npu.huawei.com/error-count"

# ============================================================================
# Workload inference labels (pods)
# ============================================================================

COMPONENT_LABEL: Final = "app.kubernetes.io/component"
APP_NAME_LABEL: Final = "app.kubernetes.io/name"
JOB_NAME_LABEL: Final = "job-name"
CRONJOB_LABEL: Final = "batch.kubernetes.io/cronjob"

# ============================================================================
# Accelerator exporter
# ============================================================================

NPU_EXPORTER_SERVICE: Final = "npu-exporter"
NPU_EXPORTER_NAMESPACE: Final = "kube-system"
NPU_EXPORTER_PORT: Final = "8082"

# ============================================================================
# Volcano custom resources
# ============================================================================

VOLCANO_JOB_RESOURCE: Final = "jobs.batch.volcano.sh"
VOLCANO_HYPERNODE_RESOURCE: Final = "hypernodes.topology.volcano.sh"
VOLCANO_QUEUE_RESOURCE: Final = "queues.scheduling.volcano.sh"
HYPERJOB_NAME_ANNOTATION: Final = "volcano.sh/hyperjob-name"
HYPERJOB_INDEX_ANNOTATION: Final = "volcano.sh/hyperjob-replicatedjob-index"

# ============================================================================
# Messages
# ============================================================================

KUBELET_DISABLED_MESSAGE: Final = "kubelet metrics disabled (client not initialized)"
KUBELET_ACCESS_DEFAULT_MESSAGE: Final = (
    "current credentials cannot access kubelet proxy (requires get nodes/proxy)"
)
KUBELET_ACCESS_HINT: Final = (
    "run `kubectl auth can-i get nodes/proxy` or grant the matching RBAC"
)
DETAIL_SEPARATOR: Final = " • "

__all__ = [
    "APP_NAME_LABEL",
    "APP_TITLE",
    "CABINET_LABEL",
    "COMPONENT_LABEL",
    "CRONJOB_LABEL",
    "DETAIL_SEPARATOR",
    "HYPERJOB_INDEX_ANNOTATION",
    "HYPERJOB_NAME_ANNOTATION",
    "HYPER_CLUSTER_LABEL",
    "HYPER_NODE_LABEL",
    "JOB_NAME_LABEL",
    "KUBELET_ACCESS_DEFAULT_MESSAGE",
    "KUBELET_ACCESS_HINT",
    "KUBELET_DISABLED_MESSAGE",
    "NODE_ROLE_LABEL_PREFIX",
    "NODE_ROLE_MASTER",
    "NODE_ROLE_WORKER",
    "NPU_AICORE_COUNT_LABEL",
    "NPU_CHIP_NAME_LABEL",
    "NPU_DEVICE_TYPE_LABEL",
    "NPU_DRIVER_VERSION_LABEL",
    "NPU_ERROR_COUNT_ANNOTATION",
    "NPU_EXPORTER_NAMESPACE",
    "NPU_EXPORTER_PORT",
    "NPU_EXPORTER_SERVICE",
    "NPU_HBM_TOTAL_ANNOTATION",
    "NPU_HBM_USED_ANNOTATION",
    "NPU_HEALTH_ANNOTATION",
    "NPU_POWER_ANNOTATION",
    "NPU_RESOURCE_MARKER",
    "NPU_RESOURCE_VENDOR",
    "NPU_TEMPERATURE_ANNOTATION",
    "NPU_UTILIZATION_ANNOTATION",
    "SUPER_POD_LABEL",
    "VOLCANO_HYPERNODE_RESOURCE",
    "VOLCANO_JOB_RESOURCE",
    "VOLCANO_QUEUE_RESOURCE",
]
