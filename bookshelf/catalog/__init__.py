"""
Catalog package for the bookshelf application.

``schemas`` defines the immutable ``Book`` record and its predicates,
``store`` the ``Catalog`` query pipeline over the full record set,
``loader`` the single asynchronous load of the data file, ``commands``
the user-interface commands and the controller that applies them,
``render`` the HTML cards and ``router`` the REST endpoints.
"""

from .router import router as catalog_router  # noqa: F401
