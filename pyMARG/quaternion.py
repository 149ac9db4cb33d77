###########################################################
# Quaternion and Vector3D data types for the MARG filter
# Hamilton convention, components ordered w, x, y, z
###########################################################

import numpy as np
import math
import numbers

###########################################################
# Constants
###########################################################

DEG2RAD = math.pi / 180.0
RAD2DEG = 180.0 / math.pi
EPSILON = 2.0*math.ldexp(1.0, -53)

class Quaternion():
    '''
    Quaternion Class
    q1 = Quaternion(1., 0., 0., 0.)
    q2 = Quaternion(w=0.7071, x=0.7071, y=0., z=0.)
    q3 = Quaternion(np.array([1., 0., 0., 0.]))
    q4 = Quaternion(q1)

    q5 = q1 + q2
    q6 = q1 * q2       (Hamilton product)
    q7 = q1 * v        (v is Vector3D, treated as [0,v])
    q8 = 0.5 * q1

    q1.conjugate
    q1.normalize() -> False if the quaternion has zero length
    q1.norm: length of quaternion
    q1.r33: rotation matrix
    q1.q: quaternion as np.array
    '''
    def __init__(self, w=1.0, x=0.0, y=0.0, z=0.0):
        if isinstance(w, numbers.Number):
            self.w = float(w)
            self.x = float(x)
            self.y = float(y)
            self.z = float(z)
        elif isinstance(w, Quaternion):
            self.w = w.w
            self.x = w.x
            self.y = w.y
            self.z = w.z
        elif isinstance(w, Vector3D):
            self.w = 0.
            self.x = w.x
            self.y = w.y
            self.z = w.z
        elif isinstance(w, (list, tuple, np.ndarray)):
            if len(w) == 4:
                self.w, self.x, self.y, self.z = (float(c) for c in w)
            elif len(w) == 3:
                self.w = 0.
                self.x, self.y, self.z = (float(c) for c in w)
            else:
                raise TypeError("Quaternion needs 3 or 4 components, got {}".format(len(w)))
        else:
            raise TypeError("Unsupported type for Quaternion: {}".format(type(w)))

    def __copy__(self):
        return Quaternion(self.w, self.x, self.y, self.z)

    def __bool__(self):
        return not self.isZero

    def __neg__(self):
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __len__(self):
        return 4

    def __iter__(self):
        return iter((self.w, self.x, self.y, self.z))

    def __str__(self):
        return f"Quaternion({self.w}, {self.x}, {self.y}, {self.z})"

    def __repr__(self):
        return str(self)

    def __add__(self, other):
        '''add two quaternions, or a quaternion and a length 4 array'''
        if isinstance(other, Quaternion):
            return Quaternion(self.w+other.w, self.x+other.x, self.y+other.y, self.z+other.z)
        elif isinstance(other, np.ndarray) and other.shape == (4,):
            return Quaternion(self.w+other[0], self.x+other[1], self.y+other[2], self.z+other[3])
        else:
            raise TypeError("Unsupported operand type for +: Quaternion and {}".format(type(other)))

    def __sub__(self, other):
        '''subtract two quaternions, or a quaternion and a length 4 array'''
        if isinstance(other, Quaternion):
            return Quaternion(self.w-other.w, self.x-other.x, self.y-other.y, self.z-other.z)
        elif isinstance(other, np.ndarray) and other.shape == (4,):
            return Quaternion(self.w-other[0], self.x-other[1], self.y-other[2], self.z-other[3])
        else:
            raise TypeError("Unsupported operand type for -: Quaternion and {}".format(type(other)))

    def __mul__(self, other):
        '''multiply two quaternions, quaternion and vector, or quaternion and scalar'''
        if isinstance(other, Quaternion):
            w = (self.w * other.w) - (self.x * other.x) - (self.y * other.y) - (self.z * other.z)
            x = (self.w * other.x) + (self.x * other.w) + (self.y * other.z) - (self.z * other.y)
            y = (self.w * other.y) - (self.x * other.z) + (self.y * other.w) + (self.z * other.x)
            z = (self.w * other.z) + (self.x * other.y) - (self.y * other.x) + (self.z * other.w)
            return Quaternion(w, x, y, z)
        elif isinstance(other, Vector3D):
            # vector is the pure quaternion [0, other]
            w = - (self.x * other.x) - (self.y * other.y) - (self.z * other.z)
            x =    self.w * other.x  +  self.y * other.z  -  self.z * other.y
            y =    self.w * other.y  -  self.x * other.z  +  self.z * other.x
            z =    self.w * other.z  +  self.x * other.y  -  self.y * other.x
            return Quaternion(w, x, y, z)
        elif isinstance(other, numbers.Number):
            return Quaternion(self.w*other, self.x*other, self.y*other, self.z*other)
        else:
            raise TypeError("Unsupported operand type for *: Quaternion and {}".format(type(other)))

    def __rmul__(self, other):
        # only scalars commute
        if isinstance(other, numbers.Number):
            return self.__mul__(other)
        raise TypeError("Unsupported operand type for *: {} and Quaternion".format(type(other)))

    def __truediv__(self, other):
        if isinstance(other, numbers.Number):
            return Quaternion(self.w/other, self.x/other, self.y/other, self.z/other)
        else:
            raise TypeError("Unsupported operand type for /: Quaternion and {}".format(type(other)))

    def __eq__(self, other):
        '''are the two quaternions equal'''
        if not isinstance(other, Quaternion):
            return NotImplemented
        return (self.w==other.w and self.x==other.x and self.y==other.y and self.z==other.z)

    __hash__ = None

    def normalize(self) -> bool:
        '''
        Scale to unit length in place.
        Returns False and leaves the quaternion untouched when its length is zero.
        '''
        mag = self.norm
        if mag == 0.0:
            return False
        inv = 1.0 / mag
        self.w *= inv
        self.x *= inv
        self.y *= inv
        self.z *= inv
        return True

    def dot(self, other) -> float:
        '''4D inner product'''
        return self.w*other.w + self.x*other.x + self.y*other.y + self.z*other.z

    @property
    def v(self):
        '''vector part of the quaternion'''
        return Vector3D(self.x, self.y, self.z)

    @property
    def q(self) -> np.ndarray:
        '''quaternion as np.array [w, x, y, z]'''
        return np.array([self.w, self.x, self.y, self.z])

    @property
    def conjugate(self):
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    @property
    def norm(self) -> float:
        '''length of quaternion'''
        return math.sqrt(self.w*self.w + self.x*self.x + self.y*self.y + self.z*self.z)

    @property
    def r33(self) -> np.ndarray:
        '''
        3x3 rotation matrix of a unit quaternion

        Assuming the quaternion R rotates a vector v according to

            v' = R * v * R⁻¹,

        this returns the matrix ℛ with v' = ℛ v.
        '''
        xx = self.x * self.x
        xy = self.x * self.y
        xz = self.x * self.z
        xw = self.x * self.w
        yy = self.y * self.y
        yz = self.y * self.z
        yw = self.y * self.w
        zz = self.z * self.z
        zw = self.z * self.w

        return np.array([
            [1.0 - 2.*(yy + zz),          2.*(xy - zw),          2.*(xz + yw)],
            [      2.*(xy + zw),    1.0 - 2.*(xx + zz),          2.*(yz - xw)],
            [      2.*(xz - yw),          2.*(yz + xw),    1.0 - 2.*(xx + yy)]
        ])

    @property
    def isZero(self) -> bool:
        return (abs(self.w) <= EPSILON and abs(self.x) <= EPSILON and abs(self.y) <= EPSILON and abs(self.z) <= EPSILON)

###############################################################################################

class Vector3D():
    '''
    3D Vector Class
    v1 = Vector3D(1., 2., 3.)
    v2 = Vector3D(x=4., y=5., z=6.)
    v3 = Vector3D(np.array([7,8,9]))

    v4 = v1 + v2
    v5 = 2. * v1

    v1.dot(v2)
    v1.cross(v2)
    v1.normalize() -> False if the vector has zero length
    v1.norm: length of vector
    v1.v: vector as np.array
    v1.q: vector as quaternion with w=0.
    '''
    def __init__(self, x=0.0, y=0.0, z=0.0):
        if isinstance(x, numbers.Number):
            self.x = float(x)
            self.y = float(y)
            self.z = float(z)
        elif isinstance(x, Vector3D):
            self.x = x.x
            self.y = x.y
            self.z = x.z
        elif isinstance(x, (list, tuple, np.ndarray)):
            if len(x) != 3:
                raise TypeError("Vector3D needs 3 components, got {}".format(len(x)))
            self.x, self.y, self.z = (float(c) for c in x)
        else:
            raise TypeError("Unsupported type for Vector3D: {}".format(type(x)))

    def __copy__(self):
        return Vector3D(self.x, self.y, self.z)

    def __bool__(self):
        return not self.isZero

    def __neg__(self):
        return Vector3D(-self.x, -self.y, -self.z)

    def __len__(self):
        return 3

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def __str__(self):
        return f"Vector3D({self.x}, {self.y}, {self.z})"

    def __repr__(self):
        return str(self)

    def __add__(self, other):
        if isinstance(other, Vector3D):
            return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)
        else:
            raise TypeError("Unsupported operand type for +: Vector3D and {}".format(type(other)))

    def __sub__(self, other):
        if isinstance(other, Vector3D):
            return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)
        else:
            raise TypeError("Unsupported operand type for -: Vector3D and {}".format(type(other)))

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            return Vector3D(self.x * other, self.y * other, self.z * other)
        elif isinstance(other, Quaternion):
            # [0, self] * other
            w = - self.x * other.x - self.y * other.y - self.z * other.z
            x =   self.x * other.w + self.y * other.z - self.z * other.y
            y = - self.x * other.z + self.y * other.w + self.z * other.x
            z =   self.x * other.y - self.y * other.x + self.z * other.w
            return Quaternion(w, x, y, z)
        else:
            raise TypeError("Unsupported operand type for *: Vector3D and {}".format(type(other)))

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self.__mul__(other)
        raise TypeError("Unsupported operand type for *: {} and Vector3D".format(type(other)))

    def __truediv__(self, other):
        if isinstance(other, numbers.Number):
            return Vector3D(self.x / other, self.y / other, self.z / other)
        else:
            raise TypeError("Unsupported operand type for /: Vector3D and {}".format(type(other)))

    def __eq__(self, other):
        '''are the two vectors equal'''
        if not isinstance(other, Vector3D):
            return NotImplemented
        return (self.x==other.x and self.y==other.y and self.z==other.z)

    __hash__ = None

    def normalize(self) -> bool:
        '''
        Scale to unit length in place.
        Returns False and leaves the vector untouched when its length is zero.
        '''
        mag = self.norm
        if mag == 0.0:
            return False
        inv = 1.0 / mag
        self.x *= inv
        self.y *= inv
        self.z *= inv
        return True

    def dot(self, other) -> float:
        if isinstance(other, Vector3D):
            return self.x * other.x + self.y * other.y + self.z * other.z
        else:
            raise TypeError("Unsupported operand type for dot product: Vector3D and {}".format(type(other)))

    def cross(self, other):
        '''
        u × v = [u2v3 - u3v2, u3v1 - u1v3, u1v2 - u2v1]
        '''
        if isinstance(other, Vector3D):
            x = (self.y * other.z) - (self.z * other.y)
            y = (self.z * other.x) - (self.x * other.z)
            z = (self.x * other.y) - (self.y * other.x)
            return Vector3D(x, y, z)
        else:
            raise TypeError("Unsupported operand type for cross product: Vector3D and {}".format(type(other)))

    @property
    def q(self):
        '''vector as pure quaternion'''
        return Quaternion(w=0., x=self.x, y=self.y, z=self.z)

    @property
    def v(self) -> np.ndarray:
        '''vector as np.array'''
        return np.array([self.x, self.y, self.z])

    @property
    def norm(self) -> float:
        return math.sqrt(self.x*self.x + self.y*self.y + self.z*self.z)

    @property
    def isZero(self) -> bool:
        return (abs(self.x) <= EPSILON and abs(self.y) <= EPSILON and abs(self.z) <= EPSILON)
