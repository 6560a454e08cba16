"""First-generation Salesforce package version tooling.

Command-line tool that submits 1GP package version uploads to a
packaging org, polls the asynchronous upload request until it settles,
and reports on packages and package versions.
"""

__version__ = "0.1.0"
