from pyMARG.quaternion import Quaternion, Vector3D
from pyMARG.config import FilterConfig
from pyMARG.madgwick import Madgwick, updateMARG

__all__ = ["Quaternion", "Vector3D", "FilterConfig", "Madgwick", "updateMARG"]
