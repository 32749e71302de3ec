"""Per-set score checks and match score summaries."""

from . import models, schemas


def validate_result_scores(match_id: int, scores: list[schemas.ScorePair]) -> schemas.ScoreValidationResult:
    errors = []
    for index, pair in enumerate(scores, start=1):
        for side, value in ((1, pair.score1), (2, pair.score2)):
            if value is not None and value < 0:
                errors.append(f"Set {index}: side {side} score cannot be negative.")
    return schemas.ScoreValidationResult(match_id=match_id, valid=not errors, errors=errors)


def summarize_scores(match_id: int, results: list[models.MatchResult]) -> schemas.MatchScoreSummary:
    sets_won1 = 0
    sets_won2 = 0
    for result in results:
        if result.score1 is None or result.score2 is None:
            continue
        if result.score1 > result.score2:
            sets_won1 += 1
        elif result.score2 > result.score1:
            sets_won2 += 1

    return schemas.MatchScoreSummary(
        match_id=match_id,
        sets_played=len(results),
        sets_won1=sets_won1,
        sets_won2=sets_won2,
        total_points1=sum(result.score1 or 0 for result in results),
        total_points2=sum(result.score2 or 0 for result in results),
    )
