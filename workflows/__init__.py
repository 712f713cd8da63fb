"""Workflow definitions module."""

from workflows.report_workflow import AssetReportWorkflow, GroupReportWorkflow, TASK_QUEUE

__all__ = ["AssetReportWorkflow", "GroupReportWorkflow", "TASK_QUEUE"]
