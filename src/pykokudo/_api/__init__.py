"""Web collaborator endpoints. Internal; use :class:`pykokudo.KokudoClient`."""
