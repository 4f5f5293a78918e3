# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic for one part of the board:
#
#   article_service     — search, detail, and author-checked writes for Article
#   comment_service     — threaded comments, cascading comment deletion
#   hashtag_service     — hashtag resolution and orphan pruning
#   pagination_service  — page numbers for the pagination bar
#   user_service        — registration, lookup, credential checks
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
