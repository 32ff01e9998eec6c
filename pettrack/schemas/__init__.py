# Schemas package (re-export feature modules for stable imports)
from .common.common import *
from .auth.auth import *
from .pets.pet import *
from .hospitals.hospital import *
from .appointments.appointment import *
from .medical.medical import *
from .prescriptions.prescription import *
from .vaccinations.vaccination import *
