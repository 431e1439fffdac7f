"""Functionable: guarded namespaces of pure functions.

Provides the `Functionable` metaclass, which promotes every function declared
in a class body to a static member and disables the dynamic-mutation
operations of the `Namespace` host layer it builds on.
"""
