# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# database access for the blog data model:
#
#   post_service  — summary report, keyword search and paged search
#   seed_service  — migrations + sample data at startup
#
# All service functions accept an AsyncSession as their first argument
# so that the caller controls the session and transaction boundary.
