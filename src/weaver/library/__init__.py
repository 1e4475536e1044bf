"""Packaged resources.

``templates/`` holds the built-in template records loaded by
:class:`weaver.templates.TemplateStore`.
"""
