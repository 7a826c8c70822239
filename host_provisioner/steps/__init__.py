from .step_10_probe_facts import ProbeFactsStep
from .step_15_set_hostname import SetHostnameStep
from .step_20_resolve_repository import ResolveRepositoryStep
from .step_30_remove_legacy_package import RemoveLegacyPackageStep
from .step_40_install_packages import InstallPackagesStep
from .step_50_activate_service import ActivateServiceStep
from .step_55_reconfigure_port import ReconfigurePortStep
from .step_60_provision_content import ProvisionContentStep
from .step_70_provision_accounts import ProvisionAccountsStep
from .step_80_install_desktop import InstallDesktopStep
from .step_85_fetch_docs import FetchDocsStep
from .step_90_teardown import TeardownStep

__all__ = [
    "ProbeFactsStep",
    "SetHostnameStep",
    "ResolveRepositoryStep",
    "RemoveLegacyPackageStep",
    "InstallPackagesStep",
    "ActivateServiceStep",
    "ReconfigurePortStep",
    "ProvisionContentStep",
    "ProvisionAccountsStep",
    "InstallDesktopStep",
    "FetchDocsStep",
    "TeardownStep",
]
