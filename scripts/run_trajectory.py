"""
run_trajectory.py
Generate a whole-body trajectory and evaluate the force constraints
"""

import numpy as np
from tqdm import tqdm

from legged_wbtraj import (
    Composite,
    ConstraintValidator,
    ForceConstraint,
    LinearComMotion,
    MotionPhase,
    NodesVariablesPhaseBased,
    RobotParams,
    TrajectoryValidator,
    WholeBodyTrajectoryGenerator,
    ee_force_nodes,
    ee_motion_nodes,
)
from legged_wbtraj.logging_config import configure_logging


def build_trot(params, step_length=0.1, t_stance=0.3, t_swing=0.4, n_steps=2):
    """
    Trotting gait: all feet down, then diagonal pairs alternate

    Returns:
        phases, footholds, com_motion
    """
    diag_a = (False, True, True, False)   # LF, RH swing
    diag_b = (True, False, False, True)   # RF, LH swing

    phases = [MotionPhase(t_stance, 0, (True,) * 4)]
    for i in range(n_steps):
        phases.append(MotionPhase(t_swing, 1 if i % 2 == 0 else 2, diag_a if i % 2 == 0 else diag_b))
    phases.append(MotionPhase(t_stance, 3, (True,) * 4))

    state = params.initial_state()
    total_time = sum(p.duration for p in phases)
    v = step_length * n_steps / total_time
    com_motion = LinearComMotion(state.base.lin.p * [1, 1, 0], [v, 0.0, 0.0], total_time)

    feet = state.get_ee_pos()
    footholds = []
    for phase in phases:
        for ee in phase.swing_legs():
            feet[ee, 0] += step_length * 2
            footholds.append(feet[ee, :2].copy())

    return phases, footholds, com_motion, state


def build_force_variables(params, ee, foot_pos, force_guess):
    """Force and motion nodes of one end-effector, tagged per its class"""
    ee_class = params.get_ee_class(ee)
    if ee_class.row_formula == 'drift':
        tags = [0, 2, 4]
    else:
        tags = [0, 2]

    force = NodesVariablesPhaseBased(ee_force_nodes(ee), tags, params.nodes_per_phase)
    motion = NodesVariablesPhaseBased(ee_motion_nodes(ee), tags, params.nodes_per_phase)
    force.set_all_positions(force_guess)
    motion.set_all_positions(foot_pos)
    return force, motion


def main():
    configure_logging()

    print("\n" + "="*70)
    print(" WHOLE-BODY TRAJECTORY GENERATION")
    print("="*70 + "\n")

    params = RobotParams()
    print(f"Robot Configuration: {params}")

    # Whole-body trajectory
    phases, footholds, com_motion, state = build_trot(params)
    generator = WholeBodyTrajectoryGenerator()
    generator.init(phases, com_motion, footholds, state, params.lift_height, params.com_offset)

    dt = 0.01
    trajectory = generator.build_whole_body_trajectory(dt)

    print(f"\nPhases: {len(phases)}, total time {generator.get_total_time():.2f} s")
    print(f"Samples: {len(trajectory)} at dt={dt} s")
    final = trajectory[-1]
    print(f"Final base position: {np.round(final.base.lin.p, 3)}")

    errors = TrajectoryValidator.check_boundary_continuity(generator)
    mismatches = TrajectoryValidator.check_contact_flags(trajectory, generator)
    apex_error = TrajectoryValidator.check_swing_apex(generator)
    print(f"Continuity: position {errors['position']:.2e}, velocity {errors['velocity']:.2e}")
    print(f"Contact flag mismatches: {len(mismatches)}")
    print(f"Swing apex error: {apex_error:.2e} m")

    # Force constraints
    print(f"\n{'='*70}")
    print(" FORCE / FRICTION CONSTRAINTS")
    print(f"{'='*70}\n")

    terrain = params.create_terrain()
    force_guess = np.array([0.0, 0.0, 100.0])

    for ee in tqdm(range(params.n_ee), desc="End-effectors"):
        force, motion = build_force_variables(params, ee, state.ee_motion[ee].p, force_guess)
        variables = Composite([force, motion])

        constraint = ForceConstraint(terrain, params.max_normal_force, ee,
                                     params.get_ee_class(ee), params.nodes_per_phase,
                                     params.mode_table)
        constraint.init_variable_depended_quantities(variables)

        violated = ConstraintValidator.check_bounds(constraint)
        jac_error = max(ConstraintValidator.check_jacobian(constraint, variables, name)
                        for name in variables.get_names())

        tqdm.write(f"  {params.ee_names[ee]} ({constraint.ee_class.name}): "
                   f"{constraint.get_rows()} rows, {len(violated)} violated, "
                   f"Jacobian error {jac_error:.2e}")

    print(f"\n{'='*70}")
    print(" DONE")
    print(f"{'='*70}\n")


if __name__ == "__main__":
    main()
