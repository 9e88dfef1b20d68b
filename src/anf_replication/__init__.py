"""Azure NetApp Files cross-region replication provisioner."""
