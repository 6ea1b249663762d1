from .router import router, get_wizard_installer
