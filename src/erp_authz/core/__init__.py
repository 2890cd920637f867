"""Core building blocks shared by the permissions and validation features."""
