"""Scheduled maintenance entrypoint.

Runs the photo purge and cart expiry sweeps once; intended for cron.
"""

import logging

from print_orders.app_logging import configure_logging
from print_orders.containers import AppContainer, build_container
from print_orders.domain.admin import MaintenanceReport


def run_maintenance(container: AppContainer) -> MaintenanceReport:
    """Run one cleanup sweep with logging configured."""
    configure_logging()
    logger = logging.getLogger(__name__)
    report = container.admin_service.run_cleanup()
    logger.info(
        "Maintenance finished at %s: %s bytes freed, %s carts expired",
        report.ran_at.isoformat(),
        report.bytes_freed,
        report.carts_expired,
    )
    return report


def main() -> None:
    run_maintenance(build_container())


if __name__ == "__main__":
    main()
