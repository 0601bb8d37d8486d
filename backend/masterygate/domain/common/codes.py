"""Machine-readable failure codes carried by Result.fail()."""

COURSE_MISCONFIGURED = "course_misconfigured"
UNKNOWN_COURSE = "unknown_course"
UNKNOWN_CONCEPT = "unknown_concept"
UNKNOWN_EVENT = "unknown_event"
CONCEPT_NOT_ATTEMPTABLE = "concept_not_attemptable"
QUIZ_NOT_DEFINED = "quiz_not_defined"
MALFORMED_SUBMISSION = "malformed_submission"
