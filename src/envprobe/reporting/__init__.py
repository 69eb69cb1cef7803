"""JUnit XML and HTML reporting for preflight runs."""
