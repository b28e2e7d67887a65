"""Launch integration scenarios on Docker or Kubernetes and report their results."""
