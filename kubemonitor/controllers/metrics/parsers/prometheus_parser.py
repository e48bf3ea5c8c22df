"""Prometheus text parser for the accelerator exporter."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from kubemonitor.models.core.node_info import NPUChip

logger = logging.getLogger(__name__)

# metric_name{label1="value1",label2="value2"} value [timestamp]
_METRIC_LINE_RE = re.compile(r"^([a-z_]+)\{([^}]*)\}\s+([\d.e+-]+)(?:\s+\d+)?$")
_LABEL_RE = re.compile(r'([a-z_]+)="([^"]*)"')
_CHIP_COUNT_METRIC = "machine_npu_nums"

# metric name -> (attribute, converter)
_METRIC_FIELDS: dict[str, tuple[str, type]] = {
    "npu_chip_info_utilization": ("utilization", float),
    "npu_chip_info_vector_utilization": ("vector_utilization", float),
    "npu_chip_info_hbm_total_memory": ("hbm_total_memory", int),
    "npu_chip_info_hbm_used_memory": ("hbm_used_memory", int),
    "npu_chip_info_temperature": ("temperature", int),
    "npu_chip_info_power": ("power", float),
    "npu_chip_info_health_status": ("health_status", int),
    "npu_chip_info_aicore_current_freq": ("aicore_current_freq", int),
    "npu_chip_info_bandwidth_rx": ("bandwidth_rx", float),
    "npu_chip_info_bandwidth_tx": ("bandwidth_tx", float),
    "npu_chip_info_voltage": ("voltage", float),
    "npu_chip_info_link_status": ("link_status", int),
    "npu_chip_link_speed": ("link_speed", int),
    "npu_chip_link_up_num": ("link_up_num", int),
    "npu_chip_info_network_status": ("network_status", int),
    "npu_chip_info_error_code": ("error_code", int),
    "npu_chip_info_hbm_ecc_single_bit_error_cnt": ("hbm_ecc_single_bit_err", int),
    "npu_chip_info_hbm_ecc_double_bit_error_cnt": ("hbm_ecc_double_bit_err", int),
    "npu_chip_roce_tx_all_pkt_num": ("roce_tx_all_pkt_num", int),
    "npu_chip_roce_rx_all_pkt_num": ("roce_rx_all_pkt_num", int),
    "npu_chip_roce_tx_err_pkt_num": ("roce_tx_err_pkt_num", int),
    "npu_chip_roce_rx_err_pkt_num": ("roce_rx_err_pkt_num", int),
}


@dataclass
class ExporterChipMetrics:
    """Raw per-chip values as exposed by the exporter (memory in MB)."""

    id: int
    model_name: str = ""
    pcie_bus_info: str = ""
    pod_name: str = ""
    namespace: str = ""
    utilization: float = 0.0
    vector_utilization: float = 0.0
    hbm_total_memory: int = 0
    hbm_used_memory: int = 0
    temperature: int = 0
    power: float = 0.0
    health_status: int = 0  # 1 = healthy
    aicore_current_freq: int = 0
    bandwidth_rx: float = 0.0
    bandwidth_tx: float = 0.0
    voltage: float = 0.0
    link_status: int = 0
    link_speed: int = 0
    link_up_num: int = 0
    network_status: int = 0
    error_code: int = 0
    hbm_ecc_single_bit_err: int = 0
    hbm_ecc_double_bit_err: int = 0
    roce_tx_all_pkt_num: int = 0
    roce_rx_all_pkt_num: int = 0
    roce_tx_err_pkt_num: int = 0
    roce_rx_err_pkt_num: int = 0

    @property
    def healthy(self) -> bool:
        return self.health_status == 1

    def to_chip(self) -> NPUChip:
        """Convert to the display model; two chips share one NPU card."""
        return NPUChip(
            npu_id=self.id // 2,
            chip=self.id % 2,
            phy_id=self.id,
            bus_id=self.pcie_bus_info,
            health="OK" if self.healthy else "Error",
            aicore=int(self.utilization),
            vector_util=self.vector_utilization,
            temperature=self.temperature,
            power=self.power,
            hbm_used=self.hbm_used_memory,
            hbm_total=self.hbm_total_memory,
            aicore_freq=self.aicore_current_freq,
            voltage=self.voltage,
            link_status=self.link_status,
            link_speed=self.link_speed,
            link_up_num=self.link_up_num,
            network_status=self.network_status,
            error_code=self.error_code,
            hbm_ecc_single_err=self.hbm_ecc_single_bit_err,
            hbm_ecc_double_err=self.hbm_ecc_double_bit_err,
            roce_tx_pkts=self.roce_tx_all_pkt_num,
            roce_rx_pkts=self.roce_rx_all_pkt_num,
            roce_tx_err_pkts=self.roce_tx_err_pkt_num,
            roce_rx_err_pkts=self.roce_rx_err_pkt_num,
            bandwidth_rx=self.bandwidth_rx,
            bandwidth_tx=self.bandwidth_tx,
        )


class PrometheusChipParser:
    """Parses exporter scrape output into per-chip metrics."""

    def parse(self, text: str) -> tuple[dict[int, ExporterChipMetrics], int]:
        """Parse exporter text.

        Args:
            text: Prometheus exposition text

        Returns:
            Tuple of (chips keyed by ``id`` label, ``machine_npu_nums`` value).
        """
        chips: dict[int, ExporterChipMetrics] = {}
        chip_count = 0

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith(f"{_CHIP_COUNT_METRIC} "):
                parts = line.split()
                if len(parts) >= 2:
                    try:
                        chip_count = int(parts[1])
                    except ValueError:
                        logger.debug("Ignoring malformed %s line: %s", _CHIP_COUNT_METRIC, line)
                continue

            match = _METRIC_LINE_RE.match(line)
            if match is None:
                continue
            metric_name, label_text, value_text = match.groups()
            try:
                value = float(value_text)
            except ValueError:
                continue

            labels = dict(_LABEL_RE.findall(label_text))
            try:
                chip_id = int(labels.get("id", ""))
            except ValueError:
                continue

            chip = chips.get(chip_id)
            if chip is None:
                chip = ExporterChipMetrics(
                    id=chip_id,
                    model_name=labels.get("model_name", ""),
                    pcie_bus_info=labels.get("pcie_bus_info", ""),
                    pod_name=labels.get("pod_name", ""),
                    namespace=labels.get("namespace", ""),
                )
                chips[chip_id] = chip

            field_spec = _METRIC_FIELDS.get(metric_name)
            if field_spec is not None:
                attribute, converter = field_spec
                setattr(chip, attribute, converter(value))

        return chips, chip_count
