"""
analysis.py
Trajectory and Constraint Validation

Checks a generated whole-body trajectory against its phase schedule and a
force constraint against finite differences and its own bounds.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


class TrajectoryValidator:
    """
    Validate a whole-body trajectory
    """

    @staticmethod
    def check_boundary_continuity(generator, eps=1e-9):
        """
        Compare the state just before and at every phase boundary

        Args:
            generator: initialized WholeBodyTrajectoryGenerator
            eps: time offset of the left-hand sample (s)

        Returns:
            errors: dict with the largest position and velocity jump
        """
        errors = {'position': 0.0, 'velocity': 0.0}
        timeline = generator.timeline

        for k in range(timeline.n_phases - 1):
            t_b = timeline.phase_end(k)
            before = generator.get_robot_state(t_b - eps)
            after = generator.get_robot_state(t_b)

            pos = [before.base.lin.p - after.base.lin.p, before.base.ang.rpy - after.base.ang.rpy]
            vel = [before.base.lin.v - after.base.lin.v, before.base.ang.w - after.base.ang.w]
            for ee_before, ee_after in zip(before.ee_motion, after.ee_motion):
                pos.append(ee_before.p - ee_after.p)
                vel.append(ee_before.v - ee_after.v)

            errors['position'] = max(errors['position'], max(np.max(np.abs(d)) for d in pos))
            errors['velocity'] = max(errors['velocity'], max(np.max(np.abs(d)) for d in vel))

        logger.info("Boundary continuity: max position jump %.2e, max velocity jump %.2e",
                    errors['position'], errors['velocity'])
        return errors

    @staticmethod
    def check_contact_flags(trajectory, generator):
        """
        Returns:
            mismatches: sample indices whose contact flags differ from the
            flags of the phase owning that instant
        """
        mismatches = []
        for i, state in enumerate(trajectory):
            phase = generator.phases[generator.get_phase_id(state.t_global)]
            if tuple(state.ee_contact) != phase.contacts:
                mismatches.append(i)

        if mismatches:
            logger.warning("Contact flags differ from phase schedule at %d samples", len(mismatches))
        return mismatches

    @staticmethod
    def check_swing_apex(generator):
        """
        Height error of every swinging end-effector at its phase midpoint

        Returns:
            max_error: largest |z_mid - z_apex| over all swings (m), 0 if none
        """
        max_error = 0.0
        timeline = generator.timeline

        for k, phase in enumerate(generator.phases):
            t_mid = timeline.phase_start(k) + 0.5*phase.duration
            state = generator.get_robot_state(t_mid)
            for ee in phase.swing_legs():
                z_start = generator.nodes[k].ee_motion[ee].p[2]
                z_end = generator.nodes[k+1].ee_motion[ee].p[2]
                apex = max(z_start, z_end) + generator.leg_lift_height
                max_error = max(max_error, abs(state.ee_motion[ee].p[2] - apex))

        logger.info("Swing apex: max height error %.2e m", max_error)
        return max_error


class ConstraintValidator:
    """
    Validate a force constraint
    """

    @staticmethod
    def check_jacobian(constraint, variables, var_set, eps=1e-6):
        """
        Central finite differences of the constraint values

        Args:
            constraint: initialized ForceConstraint
            variables: Composite the constraint is bound to
            var_set: name of the variable set to differentiate by
            eps: perturbation size

        Returns:
            max_error: largest absolute difference to the analytic Jacobian
        """
        component = variables.get_component(var_set)
        x0 = component.get_values()
        analytic = constraint.get_jacobian(var_set).toarray()
        numeric = np.zeros_like(analytic)

        try:
            for j in range(x0.size):
                x = x0.copy()
                x[j] += eps
                component.set_variables(x)
                g_plus = constraint.get_values()
                x[j] -= 2*eps
                component.set_variables(x)
                g_minus = constraint.get_values()
                numeric[:, j] = (g_plus - g_minus) / (2*eps)
        finally:
            component.set_variables(x0)

        max_error = float(np.max(np.abs(analytic - numeric))) if analytic.size else 0.0
        logger.info("%s: Jacobian w.r.t. %s max error %.2e", constraint.name, var_set, max_error)
        return max_error

    @staticmethod
    def check_bounds(constraint, tol=1e-9):
        """
        Returns:
            violated: row indices whose value lies outside its bounds
        """
        values = constraint.get_values()
        bounds = constraint.get_bounds()

        violated = [i for i, (g, b) in enumerate(zip(values, bounds))
                    if g < b.lower - tol or g > b.upper + tol]

        if violated:
            logger.info("%s: %d of %d rows violate their bounds",
                        constraint.name, len(violated), len(values))
        return violated
