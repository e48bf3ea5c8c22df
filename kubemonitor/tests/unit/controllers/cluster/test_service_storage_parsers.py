"""Tests for service, storage and workload parsers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from kubemonitor.controllers.cluster.parsers import (
    ServiceParser,
    StorageParser,
    WorkloadParser,
)


class TestServiceParser:
    """Tests for ServiceParser class."""

    @pytest.fixture
    def parser(self) -> ServiceParser:
        return ServiceParser()

    def test_parse_service_with_endpoints(self, parser: ServiceParser) -> None:
        """Test ports, ingress and endpoint count lookup."""
        service = {
            "metadata": {"name": "api", "namespace": "payments"},
            "spec": {
                "type": "LoadBalancer",
                "clusterIP": "10.96.0.10",
                "ports": [{"name": "http", "port": 80, "targetPort": 8080, "nodePort": 30080}],
            },
            "status": {"loadBalancer": {"ingress": [{"hostname": "lb.example.com"}]}},
        }

        result = parser.parse_service(service, {"payments/api": 3})

        assert result.type == "LoadBalancer"
        assert result.endpoint_count == 3
        assert result.ports[0].target_port == "8080"
        assert result.ports[0].node_port == 30080
        assert result.ingress == ["lb.example.com"]

    def test_parse_service_without_endpoints(self, parser: ServiceParser) -> None:
        """Test missing endpoint entries default to zero."""
        service = {"metadata": {"name": "db", "namespace": "data"}, "spec": {}}

        result = parser.parse_service(service)

        assert result.type == "ClusterIP"
        assert result.endpoint_count == 0


class TestStorageParser:
    """Tests for StorageParser class."""

    @pytest.fixture
    def parser(self) -> StorageParser:
        return StorageParser()

    def test_parse_pv(self, parser: StorageParser) -> None:
        """Test claim reference and volume source detection."""
        pv = {
            "metadata": {"name": "pv-1"},
            "spec": {
                "capacity": {"storage": "10Gi"},
                "accessModes": ["ReadWriteOnce"],
                "claimRef": {"namespace": "data", "name": "db-data"},
                "persistentVolumeReclaimPolicy": "Retain",
                "storageClassName": "standard",
                "csi": {"driver": "ebs.csi.aws.com"},
            },
            "status": {"phase": "Bound"},
        }

        result = parser.parse_pv(pv)

        assert result.capacity == 10 * 1024**3
        assert result.claim == "data/db-data"
        assert result.status == "Bound"
        assert result.volume_type == "csi"

    def test_parse_pvc(self, parser: StorageParser) -> None:
        """Test bound capacity and requested storage are separate."""
        pvc = {
            "metadata": {"name": "db-data", "namespace": "data"},
            "spec": {
                "volumeName": "pv-1",
                "resources": {"requests": {"storage": "5Gi"}},
            },
            "status": {"phase": "Bound", "capacity": {"storage": "10Gi"}},
        }

        result = parser.parse_pvc(pvc)

        assert result.status == "Bound"
        assert result.volume == "pv-1"
        assert result.capacity == 10 * 1024**3
        assert result.requested_storage == 5 * 1024**3


class TestWorkloadParser:
    """Tests for WorkloadParser class."""

    @pytest.fixture
    def parser(self) -> WorkloadParser:
        return WorkloadParser()

    def test_parse_deployment(self, parser: WorkloadParser) -> None:
        """Test only true conditions are kept."""
        deployment = {
            "metadata": {"name": "api", "namespace": "payments"},
            "spec": {"replicas": 3, "strategy": {"type": "RollingUpdate"}},
            "status": {
                "readyReplicas": 2,
                "conditions": [
                    {"type": "Available", "status": "True"},
                    {"type": "Progressing", "status": "False"},
                ],
            },
        }

        result = parser.parse_deployment(deployment)

        assert result.replicas == 3
        assert result.ready_replicas == 2
        assert result.strategy == "RollingUpdate"
        assert result.conditions == ["Available"]

    def test_parse_job_duration(self, parser: WorkloadParser) -> None:
        """Test job completions default and duration."""
        job = {
            "metadata": {"name": "migrate", "namespace": "payments"},
            "spec": {},
            "status": {
                "succeeded": 1,
                "startTime": "2024-05-01T10:00:00Z",
                "completionTime": "2024-05-01T10:02:30Z",
            },
        }

        result = parser.parse_job(job)

        assert result.completions == 1
        assert result.succeeded == 1
        assert result.duration == timedelta(minutes=2, seconds=30)

    def test_parse_cron_job_active_count(self, parser: WorkloadParser) -> None:
        """Test active jobs are counted from status references."""
        cron_job = {
            "metadata": {"name": "nightly", "namespace": "ops"},
            "spec": {"schedule": "0 2 * * *", "suspend": True},
            "status": {"active": [{"name": "nightly-1"}, {"name": "nightly-2"}]},
        }

        result = parser.parse_cron_job(cron_job)

        assert result.schedule == "0 2 * * *"
        assert result.suspend is True
        assert result.active == 2
