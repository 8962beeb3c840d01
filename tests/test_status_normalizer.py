"""Tests for status label normalization."""

import pytest

from taskwatch.notion.models import StatusBucket
from taskwatch.notion.status import StatusNormalizer, read_status_property


@pytest.fixture
def normalizer():
    return StatusNormalizer()


class TestStatusNormalizer:
    """Tests for StatusNormalizer."""

    @pytest.mark.parametrize(
        "label,bucket",
        [
            ("To-do", StatusBucket.TODO),
            ("Backlog", StatusBucket.TODO),
            ("Sprint planning", StatusBucket.TODO),
            ("In Progress", StatusBucket.IN_PROGRESS),
            ("In Review", StatusBucket.IN_PROGRESS),
            ("QA testing", StatusBucket.IN_PROGRESS),
            ("Done", StatusBucket.COMPLETED),
            ("Deployed", StatusBucket.COMPLETED),
            ("Closed", StatusBucket.COMPLETED),
        ],
    )
    def test_known_labels(self, normalizer, label, bucket):
        assert normalizer.normalize(label).bucket is bucket

    def test_unknown_label_defaults_to_todo(self, normalizer):
        status = normalizer.normalize("Mystery Status")

        assert status.bucket is StatusBucket.TODO
        assert status.raw_label == "Mystery Status"
        assert status.sub_label == "Mystery Status"

    def test_first_matching_rule_wins(self, normalizer):
        """Test a label hitting several rules takes the earliest one."""
        assert normalizer.normalize("Todo review").bucket is StatusBucket.TODO
        assert normalizer.normalize("Review done").bucket is StatusBucket.IN_PROGRESS

    def test_case_insensitive(self, normalizer):
        assert normalizer.normalize("IN PROGRESS").bucket is StatusBucket.IN_PROGRESS

    def test_sub_label_omitted_when_equal_to_bucket(self, normalizer):
        status = normalizer.normalize("Completed", "green")

        assert status.bucket is StatusBucket.COMPLETED
        assert status.sub_label is None
        assert status.color == "green"

    def test_default_color(self, normalizer):
        assert normalizer.normalize("Done").color == "default"

    def test_empty_label(self, normalizer):
        status = normalizer.normalize("")

        assert status.bucket is StatusBucket.TODO
        assert status.raw_label == ""

    def test_deterministic(self, normalizer):
        assert normalizer.normalize("In Review", "blue") == normalizer.normalize("In Review", "blue")

    def test_custom_rules(self):
        normalizer = StatusNormalizer(
            rules=[(lambda label: label == "shipped", StatusBucket.COMPLETED)],
            default=StatusBucket.IN_PROGRESS,
        )

        assert normalizer.bucket_for("Shipped") is StatusBucket.COMPLETED
        assert normalizer.bucket_for("Done") is StatusBucket.IN_PROGRESS


class TestReadStatusProperty:
    """Tests for read_status_property."""

    def test_status_type(self):
        properties = {"Status": {"type": "status", "status": {"name": "Done", "color": "green"}}}
        assert read_status_property(properties) == ("Done", "green")

    def test_select_type(self):
        properties = {"Status": {"type": "select", "select": {"name": "Backlog"}}}
        assert read_status_property(properties) == ("Backlog", "default")

    def test_missing_or_empty(self):
        assert read_status_property({}) is None
        assert read_status_property({"Status": {"type": "status", "status": None}}) is None
        assert read_status_property({"Status": "Done"}) is None
