"""
Impact Report Workflows

AssetReportWorkflow and GroupReportWorkflow each run one report activity:
RECONCILE -> (REUSE | PURGE) -> NORMALIZE -> PUSH -> TRIGGER -> POLL

Input errors and reconciliation failures are not retried; transient service
failures are retried by Temporal on top of the per-request transport retries.
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

# Import activities
with workflow.unsafe.imports_passed_through():
    from activities.reports import (
        generate_asset_report_activity,
        generate_group_report_activity,
        AssetReportInput,
        GroupReportInput,
        ReportOutput,
    )


TASK_QUEUE = "impact-reports"

NON_RETRYABLE_ERRORS = [
    "ValidationError",
    "ZeroWeightSumError",
    "ReconciliationError",
    "ConfigurationError",
]

REPORT_ACTIVITY_OPTIONS = {
    "start_to_close_timeout": timedelta(minutes=15),
    "heartbeat_timeout": timedelta(minutes=2),
    "retry_policy": RetryPolicy(
        maximum_attempts=3,
        initial_interval=timedelta(seconds=5),
        maximum_interval=timedelta(minutes=1),
        backoff_coefficient=2.0,
        non_retryable_error_types=NON_RETRYABLE_ERRORS,
    ),
}


@workflow.defn
class AssetReportWorkflow:
    """Generate the impact report of one asset."""

    @workflow.run
    async def run(self, input: AssetReportInput) -> ReportOutput:
        workflow.logger.info(f"Starting asset report workflow for '{input.asset.get('name')}'")
        result = await workflow.execute_activity(
            generate_asset_report_activity,
            input,
            **REPORT_ACTIVITY_OPTIONS,
        )
        workflow.logger.info(f"Asset report workflow completed: id={result.id} status={result.status}")
        return result


@workflow.defn
class GroupReportWorkflow:
    """Generate the impact report of one asset group."""

    @workflow.run
    async def run(self, input: GroupReportInput) -> ReportOutput:
        workflow.logger.info(f"Starting group report workflow for '{input.group.get('name')}'")
        result = await workflow.execute_activity(
            generate_group_report_activity,
            input,
            **REPORT_ACTIVITY_OPTIONS,
        )
        workflow.logger.info(f"Group report workflow completed: id={result.id} status={result.status}")
        return result
