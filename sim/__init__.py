"""
sim — Simulation core
=====================

Modules
-------
world
    Pure :func:`step` orchestrator and the :class:`World` wrapper.
vehicle
    :class:`VehicleState`, :class:`HostAction` and the manoeuvre variants.
traffic_policy
    :class:`DrivingPolicy` tunable constants and lane geometry helpers.
physics
    Unit conversion and the explicit-Euler integrator.
car_following
    Intelligent Driver Model acceleration.
gaps
    Leader lookup, lane prospects and lane-change safety.
maneuvers
    Per-vehicle manoeuvre state machine.
host_control
    Host command interpreter and autonomous overtaking policy.
scenario
    Forced-overtake fleet initializer.
telemetry
    Rolling host acceleration recorder.
sim_bridge
    :class:`SimBridge` background-thread driver.
"""
