"""IBM Cloud Resource Provider - Root Package.

This package manages the lifecycle of IBM Cloud resources declared as
configuration maps: managed database instances (IBM Cloud Databases) and
Event Notifications destinations and subscriptions.

Key Components:
    - domain: Resource data, schema declarations and scaling rules
    - infrastructure: Logging, polling, retry and state persistence
    - providers: IBM Cloud SDK clients and resource handlers
    - application: Resource lifecycle service used by the CLI
    - cli: Command-line interface

Usage:
    >>> ibmrp create ibm_database --file database.yaml
    >>> ibmrp read ibm_database --id crn:v1:bluemix:public:databases-for-postgresql:...
"""

__version__ = "0.1.0"
__package_name__ = "ibm-resource-provider"
