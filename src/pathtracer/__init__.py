"""Monte Carlo path tracer for scenes of spheres, built on Taichi.

This package renders spheres with diffuse, metal and glass materials under a
sky gradient, with support for:
- Recursive light transport evaluated as an explicit bounce loop
- A thin-lens camera with depth of field
- Jittered anti-aliasing and gamma-corrected 8-bit output
- Progressive rendering with accumulation

Subpackages:
    core: Vector kernel, rays, settings, integrator and rendering loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene storage, scene manager and preset scenes
    camera: Thin-lens camera with ray generation
    preview: PPM/PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
