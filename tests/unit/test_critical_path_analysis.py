"""
Unit tests for critical path reporting and what-if analysis.
"""

import pytest

from bim4d.analysis import (
    analyze_critical_path,
    analyze_task_impact,
    analyze_task_sensitivity,
    identify_risk_tasks,
    metrics_to_frame,
    print_critical_path_report,
)
from bim4d.analysis.critical_path import METRIC_COLUMNS
from bim4d.cpm import AnalysisMode, CriticalPathAnalyzer, TaskGraph


@pytest.fixture
def diamond_result(diamond):
    return CriticalPathAnalyzer(TaskGraph.build(diamond)).run()


class TestCriticalPathReport:
    """Test report aggregation."""

    def test_near_critical_and_distribution(self, diamond_result):
        report = analyze_critical_path(diamond_result, near_critical_threshold_days=5)

        assert report.get_critical_path_length() == 3
        assert [m.task_id for m in report.near_critical_tasks] == ['C']
        assert report.slack_distribution == {'0 (critical)': 3, '1-5 days': 1}
        assert report.total_tasks == 4
        assert report.project_duration == 8
        assert '3 critical tasks, 1 near-critical' in report.get_risk_summary()

    def test_threshold_excludes(self, diamond_result):
        report = analyze_critical_path(diamond_result, near_critical_threshold_days=1)
        assert report.near_critical_tasks == []

    def test_indeterminate_tasks_listed(self, make_task):
        tasks = [make_task('a', duration_days=1), make_task('u')]
        result = CriticalPathAnalyzer(TaskGraph.build(tasks)).run()
        report = analyze_critical_path(result)
        assert report.indeterminate_tasks == ['u']
        assert report.slack_distribution['unknown'] == 1

    def test_heuristic_buckets(self, diamond):
        result = CriticalPathAnalyzer(TaskGraph.build(diamond), mode=AnalysisMode.HEURISTIC).run()
        report = analyze_critical_path(result)
        # D has no end date, so every open task is flagged
        assert report.slack_distribution == {'critical (heuristic)': 4}
        assert report.near_critical_tasks == []

    def test_printed_report(self, diamond, diamond_result, capsys):
        print_critical_path_report(analyze_critical_path(diamond_result), diamond)
        out = capsys.readouterr().out
        assert 'CRITICAL PATH ANALYSIS REPORT' in out
        assert 'Project Duration: 8 days' in out
        assert 'Task B' in out


class TestRiskAndFrame:
    """Test risk filtering and tabular export."""

    def test_risk_tasks(self, diamond, diamond_result):
        risk = identify_risk_tasks(diamond_result, diamond, slack_threshold_days=5, min_duration_days=2)
        assert [m.task_id for m in risk] == ['C']

    def test_risk_skips_short_and_completed(self, diamond, diamond_result):
        assert identify_risk_tasks(diamond_result, diamond, min_duration_days=5) == []
        completed = [t.model_copy(update={'progress': 100}) if t.id == 'C' else t for t in diamond]
        assert identify_risk_tasks(diamond_result, completed, min_duration_days=1) == []

    def test_metrics_frame(self, diamond, diamond_result):
        df = metrics_to_frame(diamond_result, diamond)

        assert list(df.columns) == METRIC_COLUMNS
        assert list(df['task_id']) == ['A', 'B', 'C', 'D']
        assert df.loc[df['task_id'] == 'C', 'slack'].iloc[0] == 2
        assert df.loc[df['task_id'] == 'B', 'name'].iloc[0] == 'Task B'
        assert df['is_critical'].tolist() == [True, True, False, True]


class TestTaskImpact:
    """Test what-if duration changes."""

    def test_slip_when_path_changes(self, diamond):
        impact = analyze_task_impact(diamond, 'C', 3)

        assert impact.original_project_duration == 8
        assert impact.new_project_duration == 9
        assert impact.slip_days == 1
        assert impact.critical_path_changed
        assert impact.new_critical_path == ['A', 'C', 'D']
        assert impact.affected_task_ids == ['C', 'D']
        assert impact.get_slip_summary() == '1.0 days slip'

    def test_absorbed_by_slack(self, diamond):
        impact = analyze_task_impact(diamond, 'C', 1)
        assert impact.slip_days == 0
        assert not impact.critical_path_changed
        assert impact.get_slip_summary() == 'No impact on project finish'

    def test_input_not_modified(self, diamond):
        analyze_task_impact(diamond, 'B', 10)
        assert diamond[1].duration_days == 5

    def test_duration_floors_at_zero(self, diamond):
        impact = analyze_task_impact(diamond, 'A', -10)
        assert impact.new_project_duration == 6

    def test_unknown_task(self, diamond):
        with pytest.raises(ValueError):
            analyze_task_impact(diamond, 'nope', 1)

    def test_unscheduled_task(self, make_task):
        with pytest.raises(ValueError):
            analyze_task_impact([make_task('u')], 'u', 1)

    def test_sensitivity_sorted_by_slip(self, diamond):
        results = analyze_task_sensitivity(diamond, duration_delta_days=1)
        assert len(results) == 4
        assert results[-1].task_id == 'C'
        assert all(r.slip_days == 1 for r in results[:3])
