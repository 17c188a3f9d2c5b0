"""
GraalKit - download, cache and drive GraalVM native-image builds.
"""
