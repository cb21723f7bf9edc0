"""
Vault Explorer — typed secret values and write reconciliation for a remote vault.

Usage:
    from vaultexplorer.secrets import SecretDescriptor, plan
    write_plan = plan(prior, SecretDescriptor(name="db-pass", value="hunter2"))
"""

__version__ = "0.1.0"
