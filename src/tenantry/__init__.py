"""tenantry - multi-tenant workspaces with a reconciled AI model catalog."""

__version__ = "0.1.0"
